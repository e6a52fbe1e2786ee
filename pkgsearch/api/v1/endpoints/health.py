"""Health check endpoint. No dependencies; used for liveness probes."""

from fastapi import APIRouter

from pkgsearch.core.config import get_settings
from pkgsearch.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return ok status and the running version."""
    return HealthResponse(version=get_settings().app_version)
