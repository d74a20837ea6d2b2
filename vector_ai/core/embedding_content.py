"""
Embedding Content Builders

Turns table schemas and rows into the text that is sent to the embedding API.
"""

from typing import Any, Dict, List
from vector_ai.constants.embedding_constants import (
    DESCRIPTIVE_FIELDS,
    EMBEDDINGS_COLUMN_NAME,
    ROW_VALUE_PREVIEW_LENGTH
)
from vector_ai.models.schemas import ColumnInfo


def format_column_description(column: ColumnInfo) -> str:
    """
    Format a column as "name (TYPE, PRIMARY KEY, ...)".
    """
    extras = []
    if column.key == "PRI":
        extras.append("PRIMARY KEY")
    if column.key == "UNI":
        extras.append("UNIQUE")
    if column.key == "MUL":
        extras.append("INDEX")
    if column.extra:
        extras.append(column.extra)

    suffix = ", " + ", ".join(extras) if extras else ""
    return f"{column.field} ({column.type}{suffix})"


def build_table_schema_content(table_name: str, columns: List[ColumnInfo], row_count: int) -> str:
    """
    Build the embedding text describing a table's schema.

    Args:
        table_name: Table name
        columns: DESCRIBE-style columns
        row_count: Number of rows in the table

    Returns:
        Multi-line description of the table
    """
    columns_description = ", ".join(format_column_description(col) for col in columns)
    return (
        f"Table: {table_name}\n"
        f"Columns: {columns_description}\n"
        f"Row Count: {row_count}\n"
        f"Description: Database table containing {len(columns)} columns with {row_count} records."
    )


def get_row_description(table_name: str, row: Dict[str, Any]) -> str:
    """First truthy descriptive field of the row, else "<table> record"."""
    for field in DESCRIPTIVE_FIELDS:
        if row.get(field):
            return str(row[field])
    return f"{table_name} record"


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, str) and len(value) > ROW_VALUE_PREVIEW_LENGTH:
        return value[:ROW_VALUE_PREVIEW_LENGTH] + "..."
    return str(value)


def build_row_content(
    table_name: str,
    columns: List[ColumnInfo],
    row: Dict[str, Any],
    row_index: int
) -> str:
    """
    Build the embedding text for a single row.

    The embeddings column itself is left out so a regenerated vector does not
    depend on the previous one.

    Args:
        table_name: Table name
        columns: DESCRIBE-style columns, in output order
        row: Row values keyed by column name
        row_index: Zero-based position of the row (offset applied)

    Returns:
        Multi-line description of the row
    """
    row_data = ", ".join(
        f"{col.field}: {_format_value(row.get(col.field))}"
        for col in columns
        if col.field != EMBEDDINGS_COLUMN_NAME
    )
    return (
        f"Table: {table_name}, Row {row_index + 1}\n"
        f"Data: {row_data}\n"
        f"Description: Record from {table_name} table containing information about "
        f"{get_row_description(table_name, row)}."
    )
