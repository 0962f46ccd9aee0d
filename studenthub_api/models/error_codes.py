"""Error taxonomy: stable error codes, status→code and code→message tables.

Codes are independent of HTTP status. The generic codes have a canonical
human-readable message; domain codes raised by business logic (e.g. the
authentication codes) carry their own wording and are absent from
``ERROR_MESSAGES``.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType


class ErrorCode(str, Enum):
    """Closed enumeration of error codes returned in ``error.code``."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_INSUFFICIENT_PERMISSIONS = "AUTH_INSUFFICIENT_PERMISSIONS"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_ALREADY_EXISTS = "RESOURCE_ALREADY_EXISTS"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    # Authentication domain
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_EMAIL_ALREADY_EXISTS = "AUTH_EMAIL_ALREADY_EXISTS"
    AUTH_EMAIL_NOT_VERIFIED = "AUTH_EMAIL_NOT_VERIFIED"
    AUTH_INVALID_VERIFICATION_CODE = "AUTH_INVALID_VERIFICATION_CODE"
    AUTH_2FA_REQUIRED = "AUTH_2FA_REQUIRED"
    AUTH_INVALID_2FA_CODE = "AUTH_INVALID_2FA_CODE"
    AUTH_TOKEN_EXPIRED = "AUTH_TOKEN_EXPIRED"
    AUTH_TOKEN_REVOKED = "AUTH_TOKEN_REVOKED"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    AUTH_PASSWORD_TOO_WEAK = "AUTH_PASSWORD_TOO_WEAK"
    AUTH_SAME_PASSWORD = "AUTH_SAME_PASSWORD"
    AUTH_ACCOUNT_LOCKED = "AUTH_ACCOUNT_LOCKED"


STATUS_TO_CODE: MappingProxyType[int, ErrorCode] = MappingProxyType({
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.AUTH_REQUIRED,
    403: ErrorCode.AUTH_INSUFFICIENT_PERMISSIONS,
    404: ErrorCode.RESOURCE_NOT_FOUND,
    409: ErrorCode.RESOURCE_ALREADY_EXISTS,
    429: ErrorCode.RATE_LIMIT_EXCEEDED,
    500: ErrorCode.INTERNAL_SERVER_ERROR,
    503: ErrorCode.SERVICE_UNAVAILABLE,
})

ERROR_MESSAGES: MappingProxyType[str, str] = MappingProxyType({
    ErrorCode.VALIDATION_ERROR.value: "Validation failed",
    ErrorCode.AUTH_REQUIRED.value: "Authentication required",
    ErrorCode.AUTH_INSUFFICIENT_PERMISSIONS.value: "Insufficient permissions",
    ErrorCode.RESOURCE_NOT_FOUND.value: "Resource not found",
    ErrorCode.RESOURCE_ALREADY_EXISTS.value: "Resource already exists",
    ErrorCode.RATE_LIMIT_EXCEEDED.value: "Too many requests, please try again later",
    ErrorCode.INTERNAL_SERVER_ERROR.value: "Internal server error",
    ErrorCode.SERVICE_UNAVAILABLE.value: "Service temporarily unavailable",
})


def error_code_for_status(status_code: int) -> str:
    """Derive an error code from an HTTP status; unknown statuses map to INTERNAL_SERVER_ERROR."""
    return STATUS_TO_CODE.get(status_code, ErrorCode.INTERNAL_SERVER_ERROR).value


def resolve_message(code: str, fallback: str) -> str:
    """Return the canonical message for ``code``, or ``fallback`` when the code has none."""
    if isinstance(code, ErrorCode):
        code = code.value
    return ERROR_MESSAGES.get(code, fallback)
