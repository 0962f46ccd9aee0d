"""Pydantic Settings for the StudentHub API.

Environment variables are read without a prefix so that deployment
configuration shared with the rest of the platform applies directly.
Example: API_VERSION=1.1, LOG_LEVEL=DEBUG, THROTTLE_LIMIT=20
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings
from starlette.requests import Request

_DEFAULT_POLICIES_PATH = str(Path(__file__).with_name("throttle_policies.yaml"))


class ApiSettings(BaseSettings):
    """API configuration validated from environment variables."""

    # Service
    app_name: str = "StudentHub"
    api_version: str = "1.0"  # Reported in every envelope's meta.version
    node_env: str = "development"
    port: int = Field(default=3000, ge=1, le=65535)
    log_level: str = "INFO"

    # Endpoint throttling defaults
    throttle_limit: int = Field(default=10, ge=1)
    throttle_ttl_seconds: int = Field(default=60, ge=1)
    throttle_policies_path: str = _DEFAULT_POLICIES_PATH
    trust_forwarded_for: bool = False  # Only behind a proxy that rewrites X-Forwarded-For

    model_config = {"env_prefix": "", "extra": "ignore"}


@lru_cache(maxsize=1)
def get_settings() -> ApiSettings:
    """Process-wide settings instance. Call ``get_settings.cache_clear()`` to reload."""
    return ApiSettings()


def settings_for(request: Request) -> ApiSettings:
    """Settings the serving app was created with, else the process-wide ones."""
    settings = getattr(request.app.state, "settings", None)
    return settings if isinstance(settings, ApiSettings) else get_settings()
