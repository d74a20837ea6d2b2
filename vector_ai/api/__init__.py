"""
API Package - Router Aggregation
"""

from fastapi import APIRouter
from vector_ai.api.routes import health, tables, embeddings

# Database routes are served under /api/db
db_router = APIRouter(prefix="/api/db")
db_router.include_router(tables.router, tags=["tables"])
db_router.include_router(embeddings.router, tags=["embeddings"])

# Create main API router
api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(db_router)
