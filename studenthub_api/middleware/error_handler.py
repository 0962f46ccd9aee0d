"""Classified fault hierarchy and the central error translator.

Application code raises ``HttpError`` subclasses (classified faults). The
FastAPI exception handlers registered here catch those, Starlette's
``HTTPException``, FastAPI's ``RequestValidationError`` and every other
exception, and return the error envelope:

{ success: false, error: { code, message, statusCode, details?, timestamp },
  meta: { timestamp, requestId?, version } }

Only unclassified exceptions are logged here; their details never reach the
wire. Starlette runs the ``Exception`` handler inside ``ServerErrorMiddleware``,
which re-raises after the response is sent, so the ASGI server (uvicorn) logs
its own traceback for the same fault as well.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from studenthub_api.config.settings import settings_for
from studenthub_api.models.error_codes import (
    ErrorCode,
    error_code_for_status,
    resolve_message,
)
from studenthub_api.models.responses import ApiError, ApiMeta, Envelope

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class HttpError(Exception):
    """Base class for classified faults: an HTTP status plus a payload.

    ``payload`` is either a message string or a mapping that may carry its
    own ``code``, ``message`` and ``details``. A class-level ``code`` marks a
    domain-specific error code; without one the code is derived from the
    status.
    """

    status_code: int = 500
    message: str = "Internal server error"
    code: str | None = None

    def __init__(
        self,
        payload: Any = None,
        status_code: int | None = None,
        *,
        code: str | None = None,
        details: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.payload = self.__class__.message if payload is None else payload
        self.details = details
        self.headers = dict(headers) if headers else None

        if isinstance(self.payload, str):
            self.message = self.payload
        elif isinstance(self.payload, Mapping) and isinstance(self.payload.get("message"), str):
            self.message = self.payload["message"]
        else:
            self.message = self.__class__.message
        super().__init__(self.message)


class BadRequestError(HttpError):
    status_code = 400
    message = "Bad request"


class UnauthorizedError(HttpError):
    status_code = 401
    message = "Unauthorized"


class ForbiddenError(HttpError):
    status_code = 403
    message = "Forbidden"


class NotFoundError(HttpError):
    status_code = 404
    message = "Not found"


class ConflictError(HttpError):
    status_code = 409
    message = "Conflict"


class RateLimitExceededError(HttpError):
    """Request refused by the endpoint throttle."""

    status_code = 429
    message = "Too many requests"


class InternalServerError(HttpError):
    status_code = 500
    message = "Internal server error"


class ServiceUnavailableError(HttpError):
    status_code = 503
    message = "Service unavailable"


# ---------------------------------------------------------------------------
# Translation
# ---------------------------------------------------------------------------


def _code_value(code: Any) -> str:
    return code.value if isinstance(code, ErrorCode) else str(code)


def _from_payload(
    status_code: int,
    payload: Any,
    fallback_message: str,
    explicit_code: str | None = None,
    fallback_details: Any = None,
) -> tuple[str, str, Any]:
    """Resolve (code, message, details) for a classified fault."""
    derived_code = explicit_code or error_code_for_status(status_code)

    if isinstance(payload, str):
        return derived_code, payload, fallback_details

    if isinstance(payload, Mapping):
        code = payload.get("code") or derived_code
        message = payload.get("message")
        details = payload.get("details", fallback_details)
        if not isinstance(message, str):
            # List-valued messages (per-field validation text) become details.
            if message and details is None:
                details = message
            message = fallback_message
        return _code_value(code), message or fallback_message, details

    return derived_code, fallback_message, fallback_details


def _field_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    return [
        {
            "field": " -> ".join(str(loc) for loc in err.get("loc", ())),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]


def _classify(exc: BaseException) -> tuple[int, str, str, Any] | None:
    """Return (status, code, message, details), or None for unclassified faults."""
    if isinstance(exc, HttpError):
        code, message, details = _from_payload(
            exc.status_code,
            exc.payload,
            exc.message,
            explicit_code=_code_value(exc.code) if exc.code else None,
            fallback_details=exc.details,
        )
        return exc.status_code, code, message, details

    if isinstance(exc, RequestValidationError):
        return 400, ErrorCode.VALIDATION_ERROR.value, "Validation error", _field_errors(exc)

    if isinstance(exc, StarletteHTTPException):
        code, message, details = _from_payload(exc.status_code, exc.detail, str(exc.detail))
        return exc.status_code, code, message, details

    return None


def translate_exception(
    exc: BaseException,
    request_id: str | None = None,
    version: str | None = None,
    route: str | None = None,
) -> tuple[int, dict[str, Any]]:
    """Convert any exception into ``(status_code, error envelope)``.

    Unclassified exceptions become a 500 ``INTERNAL_SERVER_ERROR`` with the
    generic message and are logged with their traceback and ``route``.
    """
    classified = _classify(exc)

    if classified is None:
        status_code = 500
        code = ErrorCode.INTERNAL_SERVER_ERROR.value
        message = resolve_message(code, "Internal server error")
        details = None
        logger.error(
            "Unexpected error: %s",
            exc,
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={"route": route, "request_id": request_id},
        )
    else:
        status_code, code, message, details = classified

    envelope: Envelope[Any] = Envelope(
        success=False,
        error=ApiError(
            code=code,
            message=resolve_message(code, message),
            status_code=status_code,
            details=details,
        ),
        meta=ApiMeta(request_id=request_id, version=version),
    )
    return status_code, envelope.to_wire()


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id")


def error_response(request: Request, exc: BaseException) -> JSONResponse:
    """Build the error envelope response for ``exc`` raised while serving ``request``."""
    request_id = _request_id(request)
    status_code, body = translate_exception(
        exc,
        request_id=request_id,
        version=settings_for(request).api_version,
        route=f"{request.method} {request.url.path}",
    )

    headers: dict[str, str] = {}
    if isinstance(exc, (HttpError, StarletteHTTPException)) and exc.headers:
        headers.update(exc.headers)
    if request_id:
        headers["X-Request-ID"] = request_id

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
        headers=headers or None,
    )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


async def _http_error_handler(request: Request, exc: HttpError) -> JSONResponse:
    return error_response(request, exc)


async def _starlette_http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(request, exc)


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI / Pydantic request validation failures as a 400."""
    return error_response(request, exc)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log and return the generic 500 envelope."""
    return error_response(request, exc)


# ---------------------------------------------------------------------------
# Registration helper
# ---------------------------------------------------------------------------


def register_error_handlers(app: FastAPI) -> None:
    """Wire up all exception handlers on the FastAPI application."""
    app.add_exception_handler(HttpError, _http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _starlette_http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)  # type: ignore[arg-type]
