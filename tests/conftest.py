"""Shared test fixtures for the API test suite."""

from __future__ import annotations

import pytest

from studenthub_api.config.settings import get_settings
from studenthub_api.resilience.throttle import EndpointThrottle


# ---------------------------------------------------------------------------
# Settings isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch):
    """Drop deployment overrides so every test sees the default settings."""
    for key in ("API_VERSION", "APP_NAME", "NODE_ENV", "LOG_LEVEL", "PORT", "TRUST_FORWARDED_FOR"):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------

class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def endpoint_throttle(clock: FakeClock) -> EndpointThrottle:
    return EndpointThrottle(default_limit=3, default_ttl_seconds=60, clock=clock)

