"""Health and monitoring endpoints."""

from fastapi import APIRouter, Response

from ..metrics import CONTENT_TYPE_LATEST, latest_metrics
from ..schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="healthy", service="collection-box")


@router.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=latest_metrics(), media_type=CONTENT_TYPE_LATEST)
