"""Health check endpoint. No database access; used for liveness checks."""

from fastapi import APIRouter

from app.core.config import get_settings
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return ok plus the running service name and version."""
    settings = get_settings()
    return HealthResponse(service=settings.app_name, version=settings.app_version)
