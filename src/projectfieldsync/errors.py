"""Error taxonomy & redaction.

Everything this package raises on purpose derives from ``FieldSyncError`` so
the CLI can report a single failure line without catching unrelated bugs.
Messages pass through ``redact`` before they are logged or printed, since
GraphQL error payloads and request traces can echo credentials back.

Public API:
- FieldSyncError, ResponseShapeError, EventPayloadError
- classify_error(exc) -> ErrorInfo
- redact(text) -> str
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"gh[pousr]_[A-Za-z0-9]{20,255}"),  # GitHub classic/OAuth/app tokens
    re.compile(r"github_pat_\w{20,}"),  # GitHub fine-grained tokens
    re.compile(r"(?i)(bearer|token)\s+[A-Za-z0-9_\-.]{16,}"),
]

_REDACTION_PLACEHOLDER = "<redacted>"


class FieldSyncError(RuntimeError):
    """Base class for failures surfaced by a field sync run."""


class ResponseShapeError(FieldSyncError):
    """Raised when a GraphQL response is missing data the sync depends on."""


class EventPayloadError(FieldSyncError):
    """Raised when the triggering event payload cannot be read."""


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    transient: bool = False
    details: dict[str, Any] | None = None


def redact(text: str) -> str:
    """Replace credential-looking substrings with a placeholder."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def classify_error(exc: BaseException) -> ErrorInfo:
    """Best-effort classification of an exception.

    - Messages mentioning rate limits -> 'github.rate_limit', transient
    - 401/403 style failures -> 'github.auth'
    - Network-y keywords -> 'network', transient
    - ResponseShapeError -> 'response_shape'
    - ConfigError / EventPayloadError -> 'config'
    - Fallback -> 'generic'
    """
    msg = str(exc) if exc else ""
    low = msg.lower()
    name = exc.__class__.__name__

    if "rate limit" in low or "secondary rate" in low:
        return ErrorInfo("github.rate_limit", redact(msg), name, transient=True)
    status = getattr(exc, "status", None)
    if status in {401, 403} or "bad credentials" in low or "resource not accessible" in low:
        return ErrorInfo("github.auth", redact(msg), name, details={"status": status})
    if any(k in low for k in ("timeout", "timed out", "connection reset", "temporarily unavailable")):
        return ErrorInfo("network", redact(msg), name, transient=True)
    if isinstance(exc, ResponseShapeError):
        return ErrorInfo("response_shape", redact(msg), name)
    if isinstance(exc, EventPayloadError) or name == "ConfigError":
        return ErrorInfo("config", redact(msg), name)
    return ErrorInfo("generic", redact(msg), name)


__all__ = [
    "ErrorInfo",
    "EventPayloadError",
    "FieldSyncError",
    "ResponseShapeError",
    "classify_error",
    "redact",
]
