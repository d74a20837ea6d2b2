"""
Schema Introspection Service

Table listing, DESCRIBE-style column information, row counts and row reads.
Uses the SQLAlchemy inspector so the same code works on MySQL and SQLite.

Table names coming from requests must be checked with table_exists() before
they are passed to anything here that builds SQL.
"""

import base64
import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import column, inspect, literal_column, select, table, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import CompileError
from vector_ai.models.schemas import ColumnInfo

logger = logging.getLogger("vector_ai")


def quote_identifier(engine: Engine, name: str) -> str:
    """Always-quoted identifier for the engine's dialect."""
    return engine.dialect.identifier_preparer.quote_identifier(name)


def list_tables(engine: Engine) -> List[str]:
    """Return all table names in the current database (SHOW TABLES)."""
    tables = inspect(engine).get_table_names()
    logger.debug(f"Database tables: {tables}")
    return tables


def table_exists(engine: Engine, table_name: str) -> bool:
    return bool(table_name) and table_name in list_tables(engine)


def _column_type(engine: Engine, column: Dict[str, Any]) -> str:
    try:
        return column["type"].compile(dialect=engine.dialect)
    except CompileError:
        return type(column["type"]).__name__.upper()


def describe_table(engine: Engine, table_name: str) -> List[ColumnInfo]:
    """
    Describe a table the way MySQL's DESCRIBE does.

    Key is PRI for primary key columns, UNI for single-column unique
    constraints/indexes and MUL for the leading column of any other index.

    Args:
        engine: SQLAlchemy engine
        table_name: Existing table name

    Returns:
        List of ColumnInfo in table column order
    """
    inspector = inspect(engine)
    columns = inspector.get_columns(table_name)

    primary_keys = set(inspector.get_pk_constraint(table_name).get("constrained_columns") or [])

    unique_columns = set()
    for constraint in inspector.get_unique_constraints(table_name):
        names = constraint.get("column_names") or []
        if len(names) == 1:
            unique_columns.add(names[0])

    indexed_columns = set()
    for index in inspector.get_indexes(table_name):
        names = [name for name in index.get("column_names") or [] if name]
        if not names:
            continue
        if index.get("unique") and len(names) == 1:
            unique_columns.add(names[0])
        else:
            indexed_columns.add(names[0])

    structure = []
    for column in columns:
        name = column["name"]
        if name in primary_keys:
            key = "PRI"
        elif name in unique_columns:
            key = "UNI"
        elif name in indexed_columns:
            key = "MUL"
        else:
            key = ""

        default = column.get("default")
        structure.append(ColumnInfo(
            field=name,
            type=_column_type(engine, column),
            null="YES" if column.get("nullable", True) else "NO",
            key=key,
            default=str(default) if default is not None else None,
            extra="auto_increment" if column.get("autoincrement") is True else ""
        ))

    logger.debug(f"Table structure for {table_name}: {[c.field for c in structure]}")
    return structure


def primary_key_column(columns: List[ColumnInfo]) -> Optional[ColumnInfo]:
    """Return the first primary key column, or None."""
    for column in columns:
        if column.key == "PRI":
            return column
    return None


def count_rows(engine: Engine, table_name: str) -> int:
    query = text(f"SELECT COUNT(*) AS count FROM {quote_identifier(engine, table_name)}")
    with engine.connect() as conn:
        return int(conn.execute(query).scalar() or 0)


def to_json_safe(value: Any) -> Any:
    """Convert values the JSON encoder cannot handle (binary columns)."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return base64.b64encode(raw).decode("ascii")
    return value


def row_to_dict(row) -> Dict[str, Any]:
    return {key: to_json_safe(value) for key, value in row._mapping.items()}


def fetch_rows(
    engine: Engine,
    table_name: str,
    limit: Optional[int] = None,
    offset: int = 0,
    order_by: Optional[str] = None,
    json_safe: bool = True
) -> List[Dict[str, Any]]:
    """
    Read rows from a table.

    Args:
        engine: SQLAlchemy engine
        table_name: Existing table name
        limit: Maximum rows; None reads every row from offset
        offset: Rows to skip
        order_by: Optional existing column to order by
        json_safe: Convert binary values for JSON output; False keeps raw driver values

    Returns:
        Rows as dictionaries
    """
    query = select(literal_column("*")).select_from(table(table_name))
    if order_by:
        query = query.order_by(column(order_by))
    if limit is not None:
        query = query.limit(limit)
    if offset:
        # the dialect supplies its own "no limit" form for OFFSET without LIMIT
        query = query.offset(offset)

    with engine.connect() as conn:
        result = conn.execute(query)
        if json_safe:
            return [row_to_dict(row) for row in result]
        return [dict(row._mapping) for row in result]


def get_database_info(engine: Engine) -> Dict[str, Any]:
    """
    Current database name, server version and tables.
    """
    with engine.connect() as conn:
        version_info = conn.dialect.server_version_info or ()

    info = {
        "currentDatabase": engine.url.database,
        "dialect": engine.dialect.name,
        "serverVersion": ".".join(str(part) for part in version_info),
        "tables": list_tables(engine)
    }
    logger.debug(f"Database information: {info}")
    return info
