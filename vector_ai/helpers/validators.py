"""
Validation Helpers

Request validation shared by the table and embedding controllers.
"""

import logging
from fastapi import HTTPException, status
from sqlalchemy.engine import Engine
from vector_ai.services.schema_service import table_exists

logger = logging.getLogger("vector_ai")


def ensure_table_exists(engine: Engine, table_name: str):
    """
    Check a requested table name against the database's tables.

    Raises:
        HTTPException: 400 for an empty name, 404 for an unknown table
    """
    if not table_name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Table name is required")
    if not table_exists(engine, table_name):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Table '{table_name}' does not exist"
        )


def server_error(message: str, error: Exception) -> HTTPException:
    """Log an unexpected failure and wrap it as a 500 with message and error text."""
    logger.exception(f"{message}: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": message, "error": str(error)}
    )
