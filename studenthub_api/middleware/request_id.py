"""Request ID middleware.

Propagates the caller's ``X-Request-ID`` (or generates a UUID4), stores it
in ``request.state.request_id`` and in a context variable read by the JSON
log formatter, and echoes it in the ``X-Request-ID`` response header.
"""

from __future__ import annotations

import re
import uuid
from contextvars import ContextVar

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Inbound IDs outside this shape are replaced rather than echoed into logs.
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")

_REQUEST_ID_VAR: ContextVar[str | None] = ContextVar("request_id", default=None)


def current_request_id() -> str | None:
    """Request ID of the request being served in this context, if any."""
    return _REQUEST_ID_VAR.get()


def resolve_request_id(header_value: str | None) -> str:
    """Reuse a well-formed inbound ID, otherwise mint a new UUID4."""
    if header_value and _VALID_REQUEST_ID.match(header_value):
        return header_value
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that assigns a request ID to each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request.headers.get("x-request-id"))
        request.state.request_id = request_id
        token = _REQUEST_ID_VAR.set(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            _REQUEST_ID_VAR.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
