"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from model_router import __version__
from model_router.services.resolver import ModelResolver, get_resolver

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Basic health check response."""

    status: str
    version: str
    timestamp: datetime


class DetailedHealthResponse(BaseModel):
    """Detailed health check response with provider configuration."""

    status: str
    version: str
    timestamp: datetime
    providers: dict[str, str]


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns service status, version, and timestamp.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/detailed", response_model=DetailedHealthResponse)
async def detailed_health_check(
    resolver: ModelResolver = Depends(get_resolver),
) -> DetailedHealthResponse:
    """
    Detailed health check with provider status.

    A provider counts as up when its credentials are configured; the
    service is degraded when only some providers are.
    """
    status_by_provider = resolver.gate.provider_status()
    providers = {
        name: "configured" if configured else "missing"
        for name, configured in status_by_provider.items()
    }

    if all(status_by_provider.values()):
        status = "healthy"
    elif any(status_by_provider.values()):
        status = "degraded"
    else:
        status = "unhealthy"

    return DetailedHealthResponse(
        status=status,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        providers=providers,
    )
