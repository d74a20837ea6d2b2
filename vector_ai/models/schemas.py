"""
Data Models for API Request/Response

This module defines Pydantic models for response validation.
Field names are snake_case in Python and camelCase on the wire.
"""

from typing import List, Optional, Dict, Any, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that serializes field names as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ColumnInfo(BaseModel):
    """
    One column of a table, shaped like a MySQL DESCRIBE row.
    """
    model_config = ConfigDict(populate_by_name=True)

    field: str = Field(alias="Field")
    type: str = Field(alias="Type")
    null: str = Field(alias="Null")  # "YES" or "NO"
    key: str = Field(default="", alias="Key")  # "PRI", "UNI", "MUL" or ""
    default: Optional[Any] = Field(default=None, alias="Default")
    extra: str = Field(default="", alias="Extra")


class OffsetPagination(CamelModel):
    limit: int
    offset: int
    total: int
    has_more: bool


class Pagination(OffsetPagination):
    current_page: int
    total_pages: int


# ============================================================================
# TABLE ENDPOINTS
# ============================================================================

class TableSummary(CamelModel):
    """
    Overview entry for a single table (column and row counts).
    """
    table_name: str
    columns: Union[int, str]
    rows: Union[int, str]
    status: str
    error: Optional[str] = None


class TablesOverview(CamelModel):
    total_tables: int
    tables: List[TableSummary]


class TableSample(CamelModel):
    """
    Structure, row count and a few sample rows for one table.
    """
    table_name: str
    structure: Optional[List[ColumnInfo]] = None
    row_count: Union[int, str]
    sample_data: Optional[List[Dict[str, Any]]] = None
    status: str
    error: Optional[str] = None


class AllTablesData(CamelModel):
    total_tables: int
    sample_limit: int
    tables: List[TableSample]


class TableData(CamelModel):
    table_name: str
    structure: List[ColumnInfo]
    records: List[Dict[str, Any]]
    pagination: Pagination


class TableRecords(CamelModel):
    table_name: str
    records: List[Dict[str, Any]]


# ============================================================================
# EMBEDDING ENDPOINTS
# ============================================================================

class SchemaEmbedding(CamelModel):
    """
    Schema embedding for one table. The embedding and record count use
    MongoDB extended JSON wrappers ($numberDouble / $numberInt).
    """
    embedding_id: Optional[int] = None
    content: str
    embedding: List[Dict[str, str]]
    metadata: Dict[str, Any]
    created_at: str
    updated_at: str


class TableFailure(CamelModel):
    table_name: str
    error: str
    status: str = "failed"


class SchemaEmbeddingsBatch(CamelModel):
    total_tables: int
    successful_embeddings: int
    failed_embeddings: int
    embeddings: List[SchemaEmbedding]
    failures: List[TableFailure]


class RowEmbedding(CamelModel):
    embedding_id: int
    content: str
    embedding: List[float]
    metadata: Dict[str, Any]
    created_at: str
    updated_at: str


class RowEmbeddingFailure(CamelModel):
    table_name: str
    row_index: int
    primary_key: Optional[Any] = None
    error: str
    status: str = "failed"


class RowEmbeddingPagination(CamelModel):
    offset: int
    limit: Optional[int] = None
    processed_rows: int


class RowEmbeddingsResult(CamelModel):
    table_name: str
    total_processed: int
    successful_embeddings: int
    failed_embeddings: int
    storage: Dict[str, str]
    pagination: RowEmbeddingPagination
    embeddings: List[Union[RowEmbedding, RowEmbeddingFailure]]


class TableRowEmbeddingSummary(CamelModel):
    table_name: str
    total_processed: int = 0
    successful_embeddings: int = 0
    failed_embeddings: int = 0
    status: str
    error: Optional[str] = None


class AllRowEmbeddingsResult(CamelModel):
    total_tables: int
    processed_tables: int
    total_processed: int
    successful_embeddings: int
    failed_embeddings: int
    tables: List[TableRowEmbeddingSummary]
    skipped_tables: List[TableFailure]


class TableEmbeddings(CamelModel):
    table_name: str
    embeddings: List[Dict[str, Any]]
    pagination: OffsetPagination


class EmbeddingStatistics(CamelModel):
    total_embeddings: int
    by_table: List[Dict[str, Any]]


class AllEmbeddings(CamelModel):
    embeddings: List[Dict[str, Any]]
    statistics: EmbeddingStatistics
    pagination: OffsetPagination


# ============================================================================
# RESPONSE ENVELOPES
# ============================================================================

class ApiResponse(CamelModel):
    """
    Standard success envelope: {success, message, data}.
    """
    success: bool = True
    message: str


class TablesOverviewResponse(ApiResponse):
    data: TablesOverview


class AllTablesDataResponse(ApiResponse):
    data: AllTablesData


class TableDataResponse(ApiResponse):
    data: TableData


class TableRecordsResponse(ApiResponse):
    data: List[TableRecords]


class SchemaEmbeddingResponse(ApiResponse):
    data: SchemaEmbedding


class SchemaEmbeddingsBatchResponse(ApiResponse):
    data: SchemaEmbeddingsBatch


class RowEmbeddingsResponse(ApiResponse):
    data: RowEmbeddingsResult


class AllRowEmbeddingsResponse(ApiResponse):
    data: AllRowEmbeddingsResult


class TableEmbeddingsResponse(ApiResponse):
    data: TableEmbeddings


class AllEmbeddingsResponse(ApiResponse):
    data: AllEmbeddings


class HealthCheckResponse(BaseModel):
    """
    Response model for the /health API endpoint.
    """
    status: str
    database: dict
    embeddings: dict
    timestamp: str
