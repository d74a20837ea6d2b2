"""
Tables Controller

Handles database overview and table data endpoints.
Uses the read database connection.
"""

import logging
from typing import Optional
from fastapi import HTTPException
from vector_ai.config.database import get_engine
from vector_ai.helpers.pagination import build_pagination
from vector_ai.helpers.validators import ensure_table_exists, server_error
from vector_ai.models.schemas import (
    AllTablesData,
    AllTablesDataResponse,
    TableData,
    TableDataResponse,
    TableRecords,
    TableRecordsResponse,
    TableSample,
    TableSummary,
    TablesOverview,
    TablesOverviewResponse,
)
from vector_ai.services.schema_service import (
    count_rows,
    describe_table,
    fetch_rows,
    list_tables,
)

logger = logging.getLogger("vector_ai")


def get_table_details() -> TablesOverviewResponse:
    """
    Database overview: every table with its column and row counts.

    A table that fails introspection is reported with status "Error"
    instead of failing the whole request.
    """
    try:
        engine = get_engine()
        tables = list_tables(engine)

        table_details = []
        for table_name in tables:
            try:
                column_count = len(describe_table(engine, table_name))
                row_count = count_rows(engine, table_name)
                logger.debug(f"Table {table_name}: {column_count} columns, {row_count} rows")
                table_details.append(TableSummary(
                    table_name=table_name,
                    columns=column_count,
                    rows=row_count,
                    status="OK"
                ))
            except Exception as e:
                logger.warning(f"Error inspecting table {table_name}: {e}")
                table_details.append(TableSummary(
                    table_name=table_name,
                    columns="Error",
                    rows="Error",
                    status="Error",
                    error=str(e)
                ))

        return TablesOverviewResponse(
            message="Database tables retrieved successfully",
            data=TablesOverview(total_tables=len(tables), tables=table_details)
        )
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error fetching table details", e)


def get_all_table_data(limit: int) -> AllTablesDataResponse:
    """
    Every table with its structure, row count and the first `limit` rows.
    """
    try:
        engine = get_engine()
        tables = list_tables(engine)

        all_table_data = []
        for table_name in tables:
            logger.info(f"Processing table: {table_name}")
            try:
                all_table_data.append(TableSample(
                    table_name=table_name,
                    structure=describe_table(engine, table_name),
                    row_count=count_rows(engine, table_name),
                    sample_data=fetch_rows(engine, table_name, limit=limit),
                    status="OK"
                ))
            except Exception as e:
                logger.error(f"Error processing table {table_name}: {e}")
                all_table_data.append(TableSample(
                    table_name=table_name,
                    row_count="Error",
                    status="Error",
                    error=str(e)
                ))

        return AllTablesDataResponse(
            message="All table data retrieved successfully",
            data=AllTablesData(
                total_tables=len(tables),
                sample_limit=limit,
                tables=all_table_data
            )
        )
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error fetching all table data", e)


def get_table_data(table_name: str, limit: int, offset: int) -> TableDataResponse:
    """
    Structure plus one page of rows for a single table.
    """
    try:
        engine = get_engine()
        ensure_table_exists(engine, table_name)

        structure = describe_table(engine, table_name)
        total_rows = count_rows(engine, table_name)
        records = fetch_rows(engine, table_name, limit=limit, offset=offset)
        logger.info(f"Retrieved {len(records)} of {total_rows} records from {table_name}")

        return TableDataResponse(
            message=f"Table data for '{table_name}' retrieved successfully",
            data=TableData(
                table_name=table_name,
                structure=structure,
                records=records,
                pagination=build_pagination(limit, offset, total_rows)
            )
        )
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error fetching table data", e)


def get_table_records(table_name: str, limit: Optional[int] = None, offset: int = 0) -> TableRecordsResponse:
    """
    Records of a single table: all rows, or a limit/offset window when limit is given.
    """
    try:
        engine = get_engine()
        ensure_table_exists(engine, table_name)

        records = fetch_rows(engine, table_name, limit=limit, offset=offset)
        logger.info(f"Retrieved {len(records)} records from {table_name}")

        return TableRecordsResponse(
            message="All table records retrieved successfully",
            data=[TableRecords(table_name=table_name, records=records)]
        )
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error fetching all table records", e)
