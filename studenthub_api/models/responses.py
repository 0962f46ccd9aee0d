"""API response envelope models and builders.

Every API response is wrapped in one envelope shape:
{ success: bool, data?: T, error?: ApiError, meta?: ApiMeta }

``data`` is present only on success and ``error`` only on failure. Field
names are camelCase on the wire (``statusCode``, ``requestId``,
``totalPages``).
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g. ``2026-01-01T12:00:00.000Z``."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiMeta(_WireModel):
    """Envelope metadata. Free-form keys beyond the declared ones are kept."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    timestamp: str = Field(default_factory=utc_timestamp)
    version: str | None = None
    request_id: str | None = None


class ApiError(_WireModel):
    """Structured failure description carried in ``error``."""

    code: str
    message: str
    status_code: int
    details: Any = None
    timestamp: str = Field(default_factory=utc_timestamp)


class Pagination(_WireModel):
    page: int
    limit: int
    total: int
    total_pages: int


class PaginatedData(_WireModel, Generic[T]):
    """Success payload shape for list endpoints."""

    items: list[T]
    pagination: Pagination


class Envelope(_WireModel, Generic[T]):
    """JSON envelope for all API responses."""

    success: bool
    data: T | None = None
    error: ApiError | None = None
    meta: ApiMeta | None = None

    def to_wire(self) -> dict[str, Any]:
        """Render the envelope with only the branch matching ``success``.

        ``data`` is emitted as-is on success, even when it is ``None``.
        """
        body: dict[str, Any] = {"success": self.success}
        if self.success:
            body["data"] = self.data
        elif self.error is not None:
            body["error"] = self.error.model_dump(by_alias=True, exclude_none=True)
        if self.meta is not None:
            body["meta"] = self.meta.model_dump(by_alias=True, exclude_none=True)
        return body


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def build_meta(overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """``{timestamp: now}`` shallow-merged with ``overrides`` (overrides win)."""
    meta: dict[str, Any] = {"timestamp": utc_timestamp()}
    if overrides:
        meta.update(overrides)
    return meta


def success(data: Any, meta: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Wrap ``data`` into a success envelope."""
    return {"success": True, "data": data, "meta": build_meta(meta)}


def paginated(
    items: Sequence[Any],
    page: int,
    limit: int,
    total: int,
    meta: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Wrap one page of ``items`` into a success envelope with pagination info.

    ``limit`` must be positive; ``totalPages`` is ``ceil(total / limit)``.
    """
    pagination = Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit),
    )
    return success(
        {"items": list(items), "pagination": pagination.model_dump(by_alias=True)},
        meta,
    )


def is_envelope(value: Any) -> bool:
    """True when ``value`` is already shaped as an envelope."""
    if isinstance(value, Envelope):
        return True
    return isinstance(value, Mapping) and "success" in value


def wrap(value: Any, meta: Mapping[str, Any] | None = None) -> Any:
    """Wrap a handler result unless it is already an envelope.

    Envelopes pass through unmodified (an ``Envelope`` model is rendered to
    its wire dict), so ``wrap(wrap(x)) == wrap(x)``.
    """
    if isinstance(value, Envelope):
        return value.to_wire()
    if is_envelope(value):
        return value
    return success(value, meta)
