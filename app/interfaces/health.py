"""
Health check router.

Provides a liveness endpoint. Besides status and version it reports how
many permissions are held only in process memory, which is non-zero
while the permission table is not migrated.
"""

from fastapi import APIRouter, Depends

from app.core.config import settings
from app.domain.permissions.ports import FallbackCache
from app.interfaces.permissions.dependencies import get_fallback_cache
from app.interfaces.permissions.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application health status, version and fallback cache size.",
)
def health_check(cache: FallbackCache = Depends(get_fallback_cache)) -> HealthResponse:
    """Return current application health status."""
    return HealthResponse(
        status="ok",
        version=settings.version,
        fallback_cache_entries=len(cache),
    )
