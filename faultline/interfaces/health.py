"""
Health check router.

Liveness/readiness probe. Reports status, version and server time.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from faultline.core.config import settings
from faultline.interfaces.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns service status, version and the current server time.",
)
def health_check() -> HealthResponse:
    """Report that the service is up."""
    return HealthResponse(
        status="ok",
        version=settings.version,
        timestamp=datetime.now(timezone.utc),
    )
