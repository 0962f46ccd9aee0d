"""Structured JSON logging configuration.

Configures Python logging to emit one JSON object per record with the
fields timestamp, level, logger, message and request_id. The request ID is
taken from the record (``extra={"request_id": ...}``) or, failing that, from
the request currently being served. Error-translation fields (route,
error_code, status_code) and throttle fields (client, endpoint) are added
when present.

SECURITY: secrets are redacted and e-mail addresses are reduced to
``abc***@domain`` before anything is written.
"""

from __future__ import annotations

import json
import logging
import re

from studenthub_api.middleware.request_id import current_request_id
from studenthub_api.models.responses import utc_timestamp
from studenthub_api.security import sanitize_email_for_logging

_SENSITIVE_PATTERNS = re.compile(
    r"(password|secret|token|api.key|authorization|verification.code)"
    r"[\s]*[=:]\s*\S+",
    re.IGNORECASE,
)

_EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}")

_OPTIONAL_FIELDS = ("route", "error_code", "status_code", "client", "endpoint")


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON with structured fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": utc_timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._sanitize(record.getMessage()),
            "request_id": getattr(record, "request_id", None) or current_request_id(),
        }

        for field in _OPTIONAL_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self._sanitize(self.formatException(record.exc_info))

        return json.dumps(entry, default=str)

    @staticmethod
    def _sanitize(text: str) -> str:
        """Redact secrets and mask e-mail addresses."""
        text = _SENSITIVE_PATTERNS.sub("[REDACTED]", text)
        return _EMAIL_PATTERN.sub(lambda m: sanitize_email_for_logging(m.group(0)), text)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with JSON formatting.

    Parameters
    ----------
    level:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
