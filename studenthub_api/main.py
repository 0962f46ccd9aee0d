"""FastAPI application entry point.

Startup: configure JSON logging, load endpoint throttle policies.
Every response, success or failure, leaves the app as an envelope.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from studenthub_api.config.settings import ApiSettings, get_settings
from studenthub_api.logging_config import configure_logging
from studenthub_api.middleware.error_handler import register_error_handlers
from studenthub_api.middleware.request_id import RequestIdMiddleware
from studenthub_api.resilience.throttle import EndpointThrottle
from studenthub_api.routers.health import create_health_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    settings: ApiSettings = app.state.settings

    configure_logging(settings.log_level)
    app.state.throttle.load_policies(settings.throttle_policies_path)
    logger.info("Starting %s API v%s on port %d", settings.app_name, settings.api_version, settings.port)

    yield

    logger.info("%s API shut down", settings.app_name)


def create_app(settings: ApiSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        version=settings.api_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.throttle = EndpointThrottle(
        default_limit=settings.throttle_limit,
        default_ttl_seconds=settings.throttle_ttl_seconds,
        trust_forwarded_for=settings.trust_forwarded_for,
    )

    register_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(create_health_router(settings=settings))

    return app


app = create_app()
