"""Security helpers: constant-time string comparison and log-safe e-mails.

``constant_time_compare`` visits every character position no matter where
the first mismatch is. Strings of different lengths are rejected before the
loop, so the comparison still leaks whether the lengths match; callers
comparing secrets of a fixed format (tokens, verification codes) are not
affected. ``hmac.compare_digest`` has the same length caveat.
"""

from __future__ import annotations

import hashlib


def constant_time_compare(a: str, b: str) -> bool:
    """Return True iff ``a == b`` without short-circuiting on the first mismatch."""
    if len(a) != len(b):
        return False

    result = 0
    for x, y in zip(a, b):
        result |= ord(x) ^ ord(y)

    return result == 0


def _split_email(email: str | None) -> tuple[str, str] | None:
    if not email or len(email) < 3:
        return None
    local_part, _, domain = email.partition("@")
    if not local_part or not domain:
        return None
    return local_part, domain.split("@")[0]


def hash_email_for_logging(email: str | None) -> str:
    """``abc***@domain (hash: 1a2b3c4d)``: three visible characters plus a stable hash."""
    parts = _split_email(email)
    if parts is None:
        return "***"

    local_part, domain = parts
    digest = hashlib.sha256(email.encode("utf-8")).hexdigest()[:8]  # type: ignore[union-attr]
    return f"{local_part[:3]}***@{domain} (hash: {digest})"


def sanitize_email_for_logging(email: str | None) -> str:
    """``abc***@domain``; short local parts keep only their first character."""
    parts = _split_email(email)
    if parts is None:
        return "***"

    local_part, domain = parts
    if len(local_part) <= 3:
        return f"{local_part[0]}***@{domain}"
    return f"{local_part[:3]}***@{domain}"
