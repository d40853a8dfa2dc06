"""Health check route shared by every service.

``GET /healthz`` answers 200 as long as the process serves HTTP; it is the
Kubernetes liveness/readiness probe for all four services.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, status
from pydantic import BaseModel, Field

from jokemesh.core.clock import format_rfc3339, utcnow
from jokemesh.core.constants import HEALTH_PATH
from jokemesh.core.logging import get_logger


logger = get_logger(__name__)

STATUS_HEALTHY = "healthy"


class HealthResponse(BaseModel):
    """Response model for /healthz."""

    status: str = Field(
        default=STATUS_HEALTHY,
        description="Service health status",
        examples=["healthy"],
    )
    service: str = Field(
        description="Service name",
        examples=["api-gateway"],
    )
    timestamp: str = Field(
        description="Current server time, RFC 3339",
        examples=["2024-05-01T12:00:00Z"],
    )


router = APIRouter(tags=["health"])


@router.get(
    HEALTH_PATH,
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
)
async def health_check(request: Request) -> HealthResponse:
    """Report the service as healthy."""
    service_name: str = getattr(request.app.state, "service_name", "unknown")
    logger.debug("Health check", service=service_name)
    return HealthResponse(
        status=STATUS_HEALTHY,
        service=service_name,
        timestamp=format_rfc3339(utcnow()),
    )
