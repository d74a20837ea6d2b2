"""
Health Check Routes
"""

from fastapi import APIRouter, Request
from vector_ai.controllers.health_controller import check_health
from vector_ai.models.schemas import HealthCheckResponse

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
def health_check(request: Request):
    """
    Health Check Endpoint

    Verifies the database connection and reports embedding client configuration.
    """
    embedding_service = getattr(request.app.state, "embedding_service", None)
    return check_health(embedding_service)
