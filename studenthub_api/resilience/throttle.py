"""Per-client, per-endpoint token bucket throttle.

Each ``(client, endpoint)`` pair gets its own bucket holding ``limit`` tokens
refilled at ``limit / ttl`` tokens per second. Unlike a blocking limiter, a
request that finds the bucket empty is refused immediately with a
``RateLimitExceededError`` (HTTP 429, ``RATE_LIMIT_EXCEEDED``) that tells the
caller when to retry.

Key behaviors:
- try_acquire() never sleeps; it consumes a token or reports the wait time
- Per-endpoint overrides loaded via load_policies()
- Throttling one client or endpoint does not affect the others
- throttle() exposes the check as a FastAPI dependency
- Buckets idle for a full window are evicted
- Clients are keyed on the socket peer; X-Forwarded-For only when trusted
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any

from fastapi import Request

from studenthub_api.config.throttle_policies import load_throttle_policies
from studenthub_api.middleware.error_handler import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass
class TokenBucket:
    """Token bucket state for a single (client, endpoint) pair."""

    key: tuple[str, str]
    tokens: float
    max_tokens: int
    refill_rate: float  # tokens per second
    last_refill: float  # time.monotonic()


class EndpointThrottle:
    """In-memory throttle keyed by client and endpoint.

    Args:
        default_limit: Requests allowed per window when no policy applies.
        default_ttl_seconds: Window length in seconds.
        clock: Monotonic clock, injectable for tests.
        trust_forwarded_for: Key clients on the first ``X-Forwarded-For``
            entry. Enable only behind a proxy that overwrites the header.
    """

    def __init__(
        self,
        default_limit: int = 10,
        default_ttl_seconds: int = 60,
        clock: Callable[[], float] = time.monotonic,
        trust_forwarded_for: bool = False,
    ) -> None:
        self._default_limit = default_limit
        self._default_ttl = default_ttl_seconds
        self._clock = clock
        self.trust_forwarded_for = trust_forwarded_for
        self._last_sweep = clock()
        self._buckets: dict[tuple[str, str], TokenBucket] = {}
        self._policies: dict[str, tuple[int, int]] = {}

    def _budget(self, endpoint: str, limit: int | None, ttl: int | None) -> tuple[int, int]:
        """Effective (limit, ttl): policy file beats call-site values beats defaults."""
        if endpoint in self._policies:
            return self._policies[endpoint]
        return (
            limit if limit is not None else self._default_limit,
            ttl if ttl is not None else self._default_ttl,
        )

    def _get_or_create_bucket(
        self, client: str, endpoint: str, limit: int | None, ttl: int | None
    ) -> TokenBucket:
        key = (client, endpoint)
        if key not in self._buckets:
            tokens, interval = self._budget(endpoint, limit, ttl)
            self._buckets[key] = TokenBucket(
                key=key,
                tokens=float(tokens),
                max_tokens=tokens,
                refill_rate=tokens / interval,
                last_refill=self._clock(),
            )
        return self._buckets[key]

    def _refill(self, bucket: TokenBucket) -> None:
        now = self._clock()
        elapsed = now - bucket.last_refill
        if elapsed <= 0:
            return
        bucket.tokens = min(bucket.tokens + elapsed * bucket.refill_rate, float(bucket.max_tokens))
        bucket.last_refill = now

    def _evict_idle(self) -> None:
        """Drop buckets untouched for a whole window, at most once per default window."""
        now = self._clock()
        if now - self._last_sweep < self._default_ttl:
            return
        self._last_sweep = now

        # Idle for max_tokens / refill_rate seconds means the bucket is full again.
        idle = [
            key
            for key, bucket in self._buckets.items()
            if now - bucket.last_refill >= bucket.max_tokens / bucket.refill_rate
        ]
        for key in idle:
            del self._buckets[key]
        if idle:
            logger.debug("Evicted %d idle throttle buckets", len(idle))

    def try_acquire(
        self,
        client: str,
        endpoint: str,
        limit: int | None = None,
        ttl: int | None = None,
    ) -> float:
        """Consume a token if one is available.

        Returns:
            ``0.0`` when the request is allowed, otherwise the number of
            seconds until the next token (nothing is consumed).
        """
        self._evict_idle()
        bucket = self._get_or_create_bucket(client, endpoint, limit, ttl)
        self._refill(bucket)

        if bucket.tokens >= 1.0:
            bucket.tokens -= 1.0
            return 0.0

        return (1.0 - bucket.tokens) / bucket.refill_rate

    def check(
        self,
        client: str,
        endpoint: str,
        limit: int | None = None,
        ttl: int | None = None,
    ) -> None:
        """Consume a token or raise ``RateLimitExceededError``."""
        wait = self.try_acquire(client, endpoint, limit, ttl)
        if wait <= 0:
            return

        retry_after = max(1, math.ceil(wait))
        logger.warning(
            "Throttled %s on %s, retry in %ds",
            client,
            endpoint,
            retry_after,
            extra={"client": client, "endpoint": endpoint},
        )
        raise RateLimitExceededError(
            details={"retryAfter": retry_after},
            headers={"Retry-After": str(retry_after)},
        )

    def get_stats(self, client: str, endpoint: str) -> dict:
        """Current bucket stats; defaults for pairs that have not been seen."""
        key = (client, endpoint)
        if key not in self._buckets:
            tokens, interval = self._budget(endpoint, None, None)
            return {
                "current_tokens": float(tokens),
                "max_tokens": tokens,
                "refill_rate": tokens / interval,
            }

        bucket = self._buckets[key]
        self._refill(bucket)
        return {
            "current_tokens": bucket.tokens,
            "max_tokens": bucket.max_tokens,
            "refill_rate": bucket.refill_rate,
        }

    def load_policies(self, yaml_path: str) -> None:
        """Load per-endpoint overrides from YAML and reset affected buckets."""
        policies = load_throttle_policies(yaml_path)
        self._policies = {
            endpoint: (policy.limit, policy.ttl_seconds)
            for endpoint, policy in policies.items()
        }

        for key in list(self._buckets):
            if key[1] in self._policies:
                del self._buckets[key]

        logger.info(
            "Loaded throttle policies for %d endpoints from %s",
            len(self._policies),
            yaml_path,
        )

    def reset(self) -> None:
        self._buckets.clear()


def _client_key(request: Request, trust_forwarded_for: bool = False) -> str:
    forwarded = request.headers.get("x-forwarded-for") if trust_forwarded_for else None
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _endpoint_key(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None) or request.url.path
    return f"{request.method} {path}"


def throttle(
    limit: int | None = None,
    ttl_seconds: int | None = None,
) -> Callable[[Request], Coroutine[Any, Any, None]]:
    """FastAPI dependency enforcing ``limit`` requests per ``ttl_seconds``.

    Uses the ``EndpointThrottle`` on ``app.state.throttle``; a missing
    throttle disables the check.

        @router.post("/auth/login", dependencies=[Depends(throttle(5, 60))])
    """

    async def dependency(request: Request) -> None:
        endpoint_throttle: EndpointThrottle | None = getattr(
            request.app.state, "throttle", None
        )
        if endpoint_throttle is None:
            return
        endpoint_throttle.check(
            _client_key(request, endpoint_throttle.trust_forwarded_for),
            _endpoint_key(request),
            limit,
            ttl_seconds,
        )

    return dependency
