"""Public models for the StudentHub API protocol."""

from studenthub_api.models.error_codes import (
    ERROR_MESSAGES,
    STATUS_TO_CODE,
    ErrorCode,
    error_code_for_status,
    resolve_message,
)
from studenthub_api.models.responses import (
    ApiError,
    ApiMeta,
    Envelope,
    PaginatedData,
    Pagination,
    is_envelope,
    paginated,
    success,
    wrap,
)

__all__ = [
    "ERROR_MESSAGES",
    "STATUS_TO_CODE",
    "ApiError",
    "ApiMeta",
    "Envelope",
    "ErrorCode",
    "PaginatedData",
    "Pagination",
    "error_code_for_status",
    "is_envelope",
    "paginated",
    "resolve_message",
    "success",
    "wrap",
]
