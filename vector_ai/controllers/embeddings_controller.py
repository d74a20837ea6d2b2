"""
Embeddings Controller

Handles schema and row embedding generation for database tables, and reads
back stored embeddings. Reads go through the read connection; the
vector_embeddings table and the per-table embeddings column are written
through the update connection.
"""

import logging
import time
from typing import List, Optional
from fastapi import HTTPException, status
from sqlalchemy.engine import Engine
from vector_ai.config.database import get_engine, get_update_engine
from vector_ai.config.settings import settings
from vector_ai.constants.embedding_constants import (
    EMBEDDINGS_COLUMN_NAME,
    EMBEDDINGS_TABLE_NAME,
    SCHEMA_ROW_ID,
)
from vector_ai.core.embedding_content import build_row_content, build_table_schema_content
from vector_ai.helpers.pagination import build_pagination
from vector_ai.helpers.validators import ensure_table_exists, server_error
from vector_ai.models.schemas import (
    AllEmbeddings,
    AllEmbeddingsResponse,
    AllRowEmbeddingsResponse,
    AllRowEmbeddingsResult,
    EmbeddingStatistics,
    RowEmbedding,
    RowEmbeddingFailure,
    RowEmbeddingPagination,
    RowEmbeddingsResponse,
    RowEmbeddingsResult,
    SchemaEmbedding,
    SchemaEmbeddingResponse,
    SchemaEmbeddingsBatch,
    SchemaEmbeddingsBatchResponse,
    TableEmbeddings,
    TableEmbeddingsResponse,
    TableFailure,
    TableRowEmbeddingSummary,
)
from vector_ai.services.schema_service import (
    count_rows,
    describe_table,
    fetch_rows,
    list_tables,
    primary_key_column,
    to_json_safe,
)
from vector_ai.utils.embedding_utils import (
    add_embeddings_column_to_table,
    count_embeddings,
    create_embeddings_table,
    embedding_counts_by_table,
    fetch_embeddings,
    store_embedding_in_table,
    update_row_embedding,
)

logger = logging.getLogger("vector_ai")


def _epoch_millis() -> str:
    return str(int(time.time() * 1000))


def _database_name(engine: Engine) -> str:
    return engine.url.database or settings.MYSQL_DATABASE


def _embeddable_tables(engine: Engine) -> List[str]:
    return [name for name in list_tables(engine) if name != EMBEDDINGS_TABLE_NAME]


# ============================================================================
# SCHEMA EMBEDDINGS
# ============================================================================

def build_schema_embedding(table_name: str, embedding_service) -> SchemaEmbedding:
    """
    Embed a table's schema description and store it in vector_embeddings.

    Args:
        table_name: Existing table name
        embedding_service: EmbeddingService instance

    Returns:
        SchemaEmbedding with the vector in $numberDouble form
    """
    engine = get_engine()
    update_engine = get_update_engine()

    columns = describe_table(engine, table_name)
    row_count = count_rows(engine, table_name)
    content = build_table_schema_content(table_name, columns, row_count)

    logger.info(f"Generating embedding for table: {table_name}")
    logger.debug(f"Content: {content}")

    embedding = embedding_service.embed_query(content)

    description = f"Table {table_name} with {len(columns)} columns"
    create_embeddings_table(update_engine)
    embedding_id = store_embedding_in_table(update_engine, {
        "table_name": table_name,
        "row_id": SCHEMA_ROW_ID,
        "content": content,
        "embedding": embedding,
        "metadata": {
            "type": "table_schema",
            "databaseName": _database_name(engine),
            "tableName": table_name,
            "recordCount": row_count,
            "columnCount": len(columns),
            "description": description
        }
    })

    now = _epoch_millis()
    return SchemaEmbedding(
        embedding_id=embedding_id,
        content=content,
        embedding=[{"$numberDouble": str(value)} for value in embedding],
        metadata={
            "databaseName": _database_name(engine),
            "tableName": table_name,
            "recordCount": {"$numberInt": str(row_count)},
            "description": description,
        },
        created_at=now,
        updated_at=now
    )


def generate_table_embedding(table_name: str, embedding_service) -> SchemaEmbeddingResponse:
    """
    Generate Embedding for a Table Schema
    """
    try:
        ensure_table_exists(get_engine(), table_name)
        schema_embedding = build_schema_embedding(table_name, embedding_service)

        return SchemaEmbeddingResponse(
            message=f"Vector embedding generated for table '{table_name}'",
            data=schema_embedding
        )
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error generating table embedding", e)


def generate_all_table_embeddings(embedding_service) -> SchemaEmbeddingsBatchResponse:
    """
    Generate schema embeddings for every table except vector_embeddings.
    A failing table is reported in `failures` and does not stop the others.
    """
    try:
        tables = _embeddable_tables(get_engine())

        embeddings = []
        failures = []
        for table_name in tables:
            try:
                embeddings.append(build_schema_embedding(table_name, embedding_service))
            except Exception as e:
                logger.error(f"Error generating schema embedding for table {table_name}: {e}")
                failures.append(TableFailure(table_name=table_name, error=str(e)))

        return SchemaEmbeddingsBatchResponse(
            message=f"Generated schema embeddings for {len(embeddings)} of {len(tables)} tables",
            data=SchemaEmbeddingsBatch(
                total_tables=len(tables),
                successful_embeddings=len(embeddings),
                failed_embeddings=len(failures),
                embeddings=embeddings,
                failures=failures
            )
        )
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error generating table embeddings", e)


# ============================================================================
# ROW EMBEDDINGS
# ============================================================================

def embed_table_rows(
    table_name: str,
    embedding_service,
    offset: int = 0,
    limit: Optional[int] = None
) -> RowEmbeddingsResult:
    """
    Embed each row of a table and store the vectors.

    Every row is written twice, independently: once to vector_embeddings and
    once to the row's own embeddings column. A row that fails is recorded as a
    failure entry and processing continues with the next row.

    Args:
        table_name: Existing table name
        embedding_service: EmbeddingService instance
        offset: Rows to skip (ordered by primary key)
        limit: Maximum rows to process; None processes the rest of the table

    Returns:
        RowEmbeddingsResult with per-row entries and counts

    Raises:
        HTTPException: 400 if the table has no primary key
    """
    engine = get_engine()
    update_engine = get_update_engine()

    columns = describe_table(engine, table_name)
    primary_key = primary_key_column(columns)
    if primary_key is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Table '{table_name}' must have a primary key to generate embeddings"
        )

    create_embeddings_table(update_engine)
    add_embeddings_column_to_table(update_engine, table_name)

    # raw values, so binary primary keys still match in the UPDATE
    rows = fetch_rows(
        engine, table_name, limit=limit, offset=offset,
        order_by=primary_key.field, json_safe=False
    )
    database_name = _database_name(engine)
    description = f"Row data from table {table_name}"

    logger.info(f"Generating embeddings for {len(rows)} rows from table: {table_name}")

    embeddings = []
    for i, raw_row in enumerate(rows):
        row_index = i + offset
        row = {key: to_json_safe(value) for key, value in raw_row.items()}
        primary_key_value = row.get(primary_key.field)

        try:
            content = build_row_content(table_name, columns, row, row_index)
            logger.info(f"Processing row {i + 1}/{len(rows)} for table {table_name} (ID: {primary_key_value})")

            embedding = embedding_service.embed_query(content)

            embedding_id = store_embedding_in_table(update_engine, {
                "table_name": table_name,
                "row_id": primary_key_value,
                "content": content,
                "embedding": embedding,
                "metadata": {
                    "databaseName": database_name,
                    "tableName": table_name,
                    "rowIndex": row_index,
                    "primaryKeyColumn": primary_key.field,
                    "primaryKeyValue": primary_key_value,
                    "description": description
                }
            })

            stored_in_table = update_row_embedding(
                update_engine, table_name, primary_key.field, raw_row.get(primary_key.field), embedding
            )
            if not stored_in_table:
                logger.warning(f"No row in {table_name} matched {primary_key.field}={primary_key_value}")

            now = _epoch_millis()
            embeddings.append(RowEmbedding(
                embedding_id=embedding_id,
                content=content,
                embedding=embedding,
                metadata={
                    "databaseName": database_name,
                    "tableName": table_name,
                    "rowIndex": row_index,
                    "primaryKey": primary_key_value,
                    "description": description,
                    "storedInTable": stored_in_table,
                    "storedInEmbeddingsTable": True
                },
                created_at=now,
                updated_at=now
            ))

            # Small delay to avoid rate limiting
            if settings.EMBEDDING_REQUEST_DELAY_SECONDS > 0:
                time.sleep(settings.EMBEDDING_REQUEST_DELAY_SECONDS)

        except Exception as e:
            logger.error(f"Error processing row {i + 1} in table {table_name}: {e}")
            embeddings.append(RowEmbeddingFailure(
                table_name=table_name,
                row_index=row_index,
                primary_key=primary_key_value,
                error=str(e)
            ))

    failed = sum(1 for entry in embeddings if isinstance(entry, RowEmbeddingFailure))

    return RowEmbeddingsResult(
        table_name=table_name,
        total_processed=len(rows),
        successful_embeddings=len(embeddings) - failed,
        failed_embeddings=failed,
        storage={
            "originalTable": f"Updated '{table_name}' table with '{EMBEDDINGS_COLUMN_NAME}' column",
            "embeddingsTable": f"Stored in '{EMBEDDINGS_TABLE_NAME}' table"
        },
        pagination=RowEmbeddingPagination(offset=offset, limit=limit, processed_rows=len(rows)),
        embeddings=embeddings
    )


def generate_table_row_embeddings(
    table_name: str,
    embedding_service,
    offset: int = 0,
    limit: Optional[int] = None
) -> RowEmbeddingsResponse:
    """
    Generate Embeddings for a Table's Rows
    """
    try:
        ensure_table_exists(get_engine(), table_name)
        result = embed_table_rows(table_name, embedding_service, offset=offset, limit=limit)

        if result.total_processed == 0:
            message = f"No data found in table '{table_name}'"
        else:
            message = (
                f"Generated embeddings for {result.total_processed} rows from table '{table_name}' "
                f"and stored in both original table and embeddings table"
            )
        return RowEmbeddingsResponse(message=message, data=result)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error generating row embeddings", e)


def generate_all_row_embeddings(embedding_service) -> AllRowEmbeddingsResponse:
    """
    Generate row embeddings for every table except vector_embeddings.

    Tables without a primary key are listed in skipped_tables; other
    per-table errors are reported with status "Error".
    """
    try:
        tables = _embeddable_tables(get_engine())

        summaries = []
        skipped = []
        for table_name in tables:
            try:
                result = embed_table_rows(table_name, embedding_service)
                summaries.append(TableRowEmbeddingSummary(
                    table_name=table_name,
                    total_processed=result.total_processed,
                    successful_embeddings=result.successful_embeddings,
                    failed_embeddings=result.failed_embeddings,
                    status="OK"
                ))
            except HTTPException as e:
                logger.warning(f"Skipping table {table_name}: {e.detail}")
                skipped.append(TableFailure(table_name=table_name, error=str(e.detail), status="skipped"))
            except Exception as e:
                logger.error(f"Error generating row embeddings for table {table_name}: {e}")
                summaries.append(TableRowEmbeddingSummary(
                    table_name=table_name,
                    status="Error",
                    error=str(e)
                ))

        processed_tables = sum(1 for summary in summaries if summary.status == "OK")
        return AllRowEmbeddingsResponse(
            message=f"Generated row embeddings for {processed_tables} of {len(tables)} tables",
            data=AllRowEmbeddingsResult(
                total_tables=len(tables),
                processed_tables=processed_tables,
                total_processed=sum(s.total_processed for s in summaries),
                successful_embeddings=sum(s.successful_embeddings for s in summaries),
                failed_embeddings=sum(s.failed_embeddings for s in summaries),
                tables=summaries,
                skipped_tables=skipped
            )
        )
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error generating row embeddings", e)


# ============================================================================
# STORED EMBEDDINGS
# ============================================================================

def _embeddings_table_ready(engine: Engine) -> bool:
    return EMBEDDINGS_TABLE_NAME in list_tables(engine)


def get_table_embeddings(table_name: str, limit: int, offset: int) -> TableEmbeddingsResponse:
    """
    Stored embeddings for one source table, newest first.
    """
    try:
        engine = get_engine()
        if _embeddings_table_ready(engine):
            embeddings = fetch_embeddings(engine, table_name=table_name, limit=limit, offset=offset)
            total = count_embeddings(engine, table_name=table_name)
        else:
            embeddings, total = [], 0

        return TableEmbeddingsResponse(
            message=f"Retrieved {len(embeddings)} embeddings for table '{table_name}'",
            data=TableEmbeddings(
                table_name=table_name,
                embeddings=embeddings,
                pagination=build_pagination(limit, offset, total, with_pages=False)
            )
        )
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error retrieving table embeddings", e)


def get_all_embeddings(limit: int, offset: int) -> AllEmbeddingsResponse:
    """
    Stored embeddings across all tables, newest first, with per-table counts.
    """
    try:
        engine = get_engine()
        if _embeddings_table_ready(engine):
            embeddings = fetch_embeddings(engine, limit=limit, offset=offset)
            total = count_embeddings(engine)
            by_table = embedding_counts_by_table(engine)
        else:
            embeddings, total, by_table = [], 0, []

        return AllEmbeddingsResponse(
            message=f"Retrieved {len(embeddings)} embeddings from all tables",
            data=AllEmbeddings(
                embeddings=embeddings,
                statistics=EmbeddingStatistics(total_embeddings=total, by_table=by_table),
                pagination=build_pagination(limit, offset, total, with_pages=False)
            )
        )
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error retrieving all embeddings", e)
