"""Health endpoint.

- GET /health — service status, enveloped like every other response
"""

from __future__ import annotations

from fastapi import APIRouter

from studenthub_api.config.settings import ApiSettings
from studenthub_api.middleware.envelope import EnvelopeRoute


def create_health_router(*, settings: ApiSettings) -> APIRouter:
    """Factory that creates the health router with injected settings."""

    health_router = APIRouter(tags=["health"], route_class=EnvelopeRoute)

    @health_router.get("/health")
    async def health() -> dict:
        """Liveness check."""
        return {
            "status": "healthy",
            "app": settings.app_name,
            "environment": settings.node_env,
        }

    return health_router
