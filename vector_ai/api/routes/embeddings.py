"""
Embeddings Routes
"""

from typing import Optional
from fastapi import APIRouter, Query, Request
from vector_ai.constants.embedding_constants import (
    DEFAULT_ALL_EMBEDDINGS_LIMIT,
    DEFAULT_EMBEDDINGS_LIMIT,
    MAX_PAGE_LIMIT,
)
from vector_ai.controllers.embeddings_controller import (
    generate_all_row_embeddings,
    generate_all_table_embeddings,
    generate_table_embedding,
    generate_table_row_embeddings,
    get_all_embeddings,
    get_table_embeddings,
)
from vector_ai.models.schemas import (
    AllEmbeddingsResponse,
    AllRowEmbeddingsResponse,
    RowEmbeddingsResponse,
    SchemaEmbeddingResponse,
    SchemaEmbeddingsBatchResponse,
    TableEmbeddingsResponse,
)

router = APIRouter()


@router.post("/table/{table_name}/embedding", response_model=SchemaEmbeddingResponse)
def table_schema_embedding(request: Request, table_name: str):
    """
    Generate Table Schema Embedding

    Embeds a text description of the table's columns and row count.
    """
    embedding_service = request.app.state.embedding_service
    return generate_table_embedding(table_name, embedding_service)


@router.post("/tables/embeddings", response_model=SchemaEmbeddingsBatchResponse)
def all_table_schema_embeddings(request: Request):
    """
    Generate All Table Schema Embeddings
    """
    embedding_service = request.app.state.embedding_service
    return generate_all_table_embeddings(embedding_service)


@router.post("/table/{table_name}/rows/embeddings", response_model=RowEmbeddingsResponse)
def table_row_embeddings(
    request: Request,
    table_name: str,
    offset: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_LIMIT)
):
    """
    Generate Table Row Embeddings

    Embeds each row (ordered by primary key) and stores the vector both in
    vector_embeddings and in the row's embeddings column.
    """
    embedding_service = request.app.state.embedding_service
    return generate_table_row_embeddings(table_name, embedding_service, offset=offset, limit=limit)


@router.post("/tables/rows/embeddings", response_model=AllRowEmbeddingsResponse)
def all_row_embeddings(request: Request):
    """
    Generate All Row Embeddings

    Runs row embedding for every table that has a primary key.
    """
    embedding_service = request.app.state.embedding_service
    return generate_all_row_embeddings(embedding_service)


@router.get("/table/{table_name}/embeddings", response_model=TableEmbeddingsResponse)
def table_embeddings(
    table_name: str,
    limit: int = Query(DEFAULT_EMBEDDINGS_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0)
):
    """
    Stored Embeddings for a Table
    """
    return get_table_embeddings(table_name, limit, offset)


@router.get("/embeddings", response_model=AllEmbeddingsResponse)
def all_embeddings(
    limit: int = Query(DEFAULT_ALL_EMBEDDINGS_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0)
):
    """
    Stored Embeddings for All Tables
    """
    return get_all_embeddings(limit, offset)
