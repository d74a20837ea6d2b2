"""
Embedding Storage Utilities

Bootstrap and storage helpers for the vector_embeddings table and the
per-table embeddings column.
"""

import json
import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
    insert,
    select,
    text,
    update,
)
from sqlalchemy.engine import Engine
from vector_ai.constants.embedding_constants import EMBEDDINGS_COLUMN_NAME, EMBEDDINGS_TABLE_NAME
from vector_ai.services.schema_service import describe_table, quote_identifier, row_to_dict

logger = logging.getLogger("vector_ai")

metadata_obj = MetaData()

vector_embeddings = Table(
    EMBEDDINGS_TABLE_NAME,
    metadata_obj,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("table_name", String(255), nullable=False),
    Column("row_id", String(255), nullable=False),
    Column("content", Text, nullable=False),
    Column("embedding", JSON, nullable=False),
    Column("metadata", JSON),
    Column("created_at", DateTime, server_default=func.now()),
    Column("updated_at", DateTime, server_default=func.now(), onupdate=func.now()),
    Index("idx_table_row", "table_name", "row_id"),
    Index("idx_table_name", "table_name"),
)


def create_embeddings_table(engine: Engine):
    """Create the vector_embeddings table if it does not exist."""
    try:
        metadata_obj.create_all(engine, tables=[vector_embeddings], checkfirst=True)
        logger.info(f"{EMBEDDINGS_TABLE_NAME} table created or already exists")
    except Exception as e:
        logger.error(f"Error creating {EMBEDDINGS_TABLE_NAME} table: {e}")
        raise


def add_embeddings_column_to_table(engine: Engine, table_name: str) -> bool:
    """
    Add a JSON embeddings column to a table when it is missing.

    Returns:
        True if the column was added, False if it already existed
    """
    try:
        columns = describe_table(engine, table_name)
        if any(col.field == EMBEDDINGS_COLUMN_NAME for col in columns):
            logger.info(f"Table '{table_name}' already has '{EMBEDDINGS_COLUMN_NAME}' column")
            return False

        alter = text(
            f"ALTER TABLE {quote_identifier(engine, table_name)} "
            f"ADD COLUMN {quote_identifier(engine, EMBEDDINGS_COLUMN_NAME)} JSON"
        )
        with engine.begin() as conn:
            conn.execute(alter)
        logger.info(f"Added '{EMBEDDINGS_COLUMN_NAME}' column to table '{table_name}'")
        return True
    except Exception as e:
        logger.error(f"Error adding embeddings column to table {table_name}: {e}")
        raise


def store_embedding_in_table(engine: Engine, embedding_data: Dict[str, Any]) -> int:
    """
    Upsert an embedding into vector_embeddings keyed on (table_name, row_id).

    Args:
        engine: SQLAlchemy engine
        embedding_data: Dict with table_name, row_id, content, embedding, metadata

    Returns:
        The id of the stored vector_embeddings row
    """
    table_name = embedding_data["table_name"]
    row_id = str(embedding_data["row_id"])
    values = {
        "content": embedding_data["content"],
        "embedding": embedding_data["embedding"],
        "metadata": embedding_data.get("metadata"),
    }

    try:
        with engine.begin() as conn:
            existing_id = conn.execute(
                select(vector_embeddings.c.id)
                .where(vector_embeddings.c.table_name == table_name)
                .where(vector_embeddings.c.row_id == row_id)
                .order_by(vector_embeddings.c.id)
                .limit(1)
            ).scalar()

            if existing_id is not None:
                conn.execute(
                    update(vector_embeddings)
                    .where(vector_embeddings.c.id == existing_id)
                    .values(**values, updated_at=func.now())
                )
                embedding_id = existing_id
            else:
                result = conn.execute(
                    insert(vector_embeddings).values(table_name=table_name, row_id=row_id, **values)
                )
                embedding_id = result.inserted_primary_key[0]

        logger.info(f"Stored embedding for {table_name} row {row_id} in {EMBEDDINGS_TABLE_NAME} table")
        return int(embedding_id)
    except Exception as e:
        logger.error(f"Error storing embedding in table: {e}")
        raise


def update_row_embedding(
    engine: Engine,
    table_name: str,
    primary_key_column: str,
    primary_key_value: Any,
    embedding: List[float]
) -> bool:
    """
    Write the embedding vector into the source row's embeddings column.

    Returns:
        True if a row matched the primary key value
    """
    query = text(
        f"UPDATE {quote_identifier(engine, table_name)} "
        f"SET {quote_identifier(engine, EMBEDDINGS_COLUMN_NAME)} = :embedding "
        f"WHERE {quote_identifier(engine, primary_key_column)} = :pk"
    )
    with engine.begin() as conn:
        result = conn.execute(query, {"embedding": json.dumps(embedding), "pk": primary_key_value})
        return result.rowcount > 0


def fetch_embeddings(
    engine: Engine,
    table_name: Optional[str] = None,
    limit: int = 10,
    offset: int = 0
) -> List[Dict[str, Any]]:
    """Stored embeddings, newest first, optionally for one source table."""
    query = select(vector_embeddings)
    if table_name is not None:
        query = query.where(vector_embeddings.c.table_name == table_name)
    query = (
        query.order_by(vector_embeddings.c.created_at.desc(), vector_embeddings.c.id.desc())
        .limit(limit)
        .offset(offset)
    )
    with engine.connect() as conn:
        return [row_to_dict(row) for row in conn.execute(query)]


def count_embeddings(engine: Engine, table_name: Optional[str] = None) -> int:
    query = select(func.count()).select_from(vector_embeddings)
    if table_name is not None:
        query = query.where(vector_embeddings.c.table_name == table_name)
    with engine.connect() as conn:
        return int(conn.execute(query).scalar() or 0)


def embedding_counts_by_table(engine: Engine) -> List[Dict[str, Any]]:
    query = (
        select(vector_embeddings.c.table_name, func.count().label("count"))
        .group_by(vector_embeddings.c.table_name)
        .order_by(vector_embeddings.c.table_name)
    )
    with engine.connect() as conn:
        return [
            {"table_name": row.table_name, "count": int(row._mapping["count"])}
            for row in conn.execute(query)
        ]
