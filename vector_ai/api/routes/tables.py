"""
Table Routes

Database overview, table structure and table data.
"""

from typing import Optional
from fastapi import APIRouter, Query
from vector_ai.constants.embedding_constants import (
    DEFAULT_SAMPLE_LIMIT,
    DEFAULT_TABLE_LIMIT,
    MAX_PAGE_LIMIT,
)
from vector_ai.controllers.tables_controller import (
    get_all_table_data,
    get_table_data,
    get_table_details,
    get_table_records,
)
from vector_ai.models.schemas import (
    AllTablesDataResponse,
    TableDataResponse,
    TableRecordsResponse,
    TablesOverviewResponse,
)

router = APIRouter()


@router.get("/tables", response_model=TablesOverviewResponse)
def tables_overview():
    """
    All Tables Overview

    Table names with column and row counts.
    """
    return get_table_details()


@router.get("/tables/data", response_model=AllTablesDataResponse)
def tables_with_sample_data(
    limit: int = Query(DEFAULT_SAMPLE_LIMIT, ge=1, le=MAX_PAGE_LIMIT)
):
    """
    All Tables with Sample Data

    Structure, row count and the first `limit` rows of every table.
    """
    return get_all_table_data(limit)


@router.get("/table/{table_name}", response_model=TableDataResponse)
def table_structure(
    table_name: str,
    limit: int = Query(DEFAULT_TABLE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0)
):
    """
    Specific Table Structure

    Table structure and one page of records with pagination details.
    """
    return get_table_data(table_name, limit, offset)


@router.get("/table/{table_name}/data", response_model=TableRecordsResponse)
def table_records(
    table_name: str,
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0)
):
    """
    Specific Table Data

    All records of the table, or a limit/offset window when limit is given.
    """
    return get_table_records(table_name, limit, offset)
