"""Resilience components: endpoint throttling."""

from studenthub_api.resilience.throttle import EndpointThrottle, TokenBucket, throttle

__all__ = [
    "EndpointThrottle",
    "TokenBucket",
    "throttle",
]
