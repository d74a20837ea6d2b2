"""
Health Check Controller

Handles health check endpoint logic.
"""

import logging
from datetime import datetime
from sqlalchemy import text
from vector_ai.config.database import get_engine
from vector_ai.models.schemas import HealthCheckResponse
from vector_ai.services.schema_service import get_database_info

logger = logging.getLogger("vector_ai")


def check_health(embedding_service=None) -> HealthCheckResponse:
    """
    Health Check Controller

    Verifies that the database connection works and reports whether the
    embedding client has an API key.
    """
    db_status = {"connected": False, "message": "", "error": None}

    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        db_status = {
            "connected": True,
            "message": "Database connection successful",
            "error": None,
            "info": get_database_info(engine)
        }
    except Exception as e:
        logger.error(f"Health Check: Database connection failed - {e}")
        db_status = {"connected": False, "message": "Database connection failed", "error": str(e)}

    if embedding_service is None:
        embeddings_status = {"configured": False, "model": None, "message": "Embedding service not initialized"}
    elif embedding_service.is_configured():
        embeddings_status = {"configured": True, "model": embedding_service.model_name, "message": "OpenAI API key configured"}
    else:
        embeddings_status = {
            "configured": False,
            "model": embedding_service.model_name,
            "message": "OPENAI_API_KEY not set; embedding routes will fail"
        }

    return HealthCheckResponse(
        status="healthy" if db_status["connected"] else "unhealthy",
        database=db_status,
        embeddings=embeddings_status,
        timestamp=datetime.now().isoformat()
    )
