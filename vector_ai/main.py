"""
FastAPI Application - Vector AI Backend

REST API that exposes a database's tables (schema and rows) and generates
OpenAI vector embeddings for table schemas and rows, storing them back in
the database.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from vector_ai.api import api_router
from vector_ai.config.database import close_connection, connect_db
from vector_ai.config.settings import settings
from vector_ai.services.embedding_service import EmbeddingService
from vector_ai.utils.logger import configure_from_settings

logger = configure_from_settings(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown logic:
    - Connect the database (the app still starts if this fails)
    - Initialize the embedding service
    """
    logger.info("🚀 Starting application...")

    try:
        connect_db()
        logger.info("✅ Database connection initialized")
    except Exception as e:
        logger.warning(f"⚠️  Could not connect to the database: {e}")
        logger.warning("   The app will start, but database routes will fail until connection is available.")

    app.state.embedding_service = EmbeddingService()
    if not app.state.embedding_service.is_configured():
        logger.warning("⚠️  OPENAI_API_KEY not set; embedding routes will fail until it is configured")

    logger.info("✅ Application ready to serve requests")

    yield

    close_connection()
    logger.info("👋 Application shutting down")


# ============================================================================
# FASTAPI APPLICATION INITIALIZATION
# ============================================================================

app = FastAPI(
    title="Vector AI Backend",
    description="Database table introspection and vector embedding generation",
    version="1.0.0",
    lifespan=lifespan
)


@app.exception_handler(StarletteHTTPException)
def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as {success: false, message, error?}."""
    if isinstance(exc.detail, dict):
        content = {"success": False, **exc.detail}
    else:
        content = {"success": False, "message": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Invalid request parameters", "error": errors}
    )


@app.get("/")
def root():
    """Service banner with the available endpoints."""
    base_url = f"http://localhost:{settings.PORT}"
    return {
        "message": "Vector AI Backend Server is running!",
        "availableEndpoints": {
            "Health Check": "GET /health",
            "All Tables Overview": "GET /api/db/tables",
            "All Tables with Sample Data": "GET /api/db/tables/data",
            "Specific Table Structure": "GET /api/db/table/:tableName",
            "Specific Table Data": "GET /api/db/table/:tableName/data",
            "Generate Table Schema Embedding": "POST /api/db/table/:tableName/embedding",
            "Generate All Table Schema Embeddings": "POST /api/db/tables/embeddings",
            "Generate Table Row Embeddings": "POST /api/db/table/:tableName/rows/embeddings",
            "Generate All Row Embeddings": "POST /api/db/tables/rows/embeddings",
            "Table Embeddings": "GET /api/db/table/:tableName/embeddings",
            "All Embeddings": "GET /api/db/embeddings"
        },
        "examples": {
            "View all tables": f"{base_url}/api/db/tables",
            "View all tables with data": f"{base_url}/api/db/tables/data",
            "View users table data": f"{base_url}/api/db/table/users/data",
            "Generate table schema embedding": f"POST {base_url}/api/db/table/users/embedding",
            "Generate all schema embeddings": f"POST {base_url}/api/db/tables/embeddings",
            "Generate row embeddings": f"POST {base_url}/api/db/table/users/rows/embeddings",
            "Generate all row embeddings": f"POST {base_url}/api/db/tables/rows/embeddings",
            "With pagination": f"{base_url}/api/db/table/users?limit=5&offset=0"
        },
        "queryParameters": {
            "limit": "Number of records to return (default: 10 for single table, 5 for all tables)",
            "offset": "Number of records to skip (default: 0)"
        }
    }


# Include API routes
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
