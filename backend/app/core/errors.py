"""Error taxonomy and centralized normalization for API responses.

Every failure surfaced by the API passes through this module to ensure:
- Consistent structure (user_message, error_category, retryable, http_status)
- Validation failures are 4xx, storage/unknown failures are 5xx
- Detailed info logged for debugging, not returned to the client
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from backend.app.core.logging import Event, log_event
from backend.app.core.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Violation:
    """A single failed rule for a single field."""

    field: str
    rule: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "rule": self.rule, "message": self.message}


class PostValidationError(Exception):
    """Raised when a post submission breaks one or more field rules."""

    def __init__(self, violations: list[Violation]) -> None:
        self.violations = list(violations)
        super().__init__("; ".join(v.message for v in self.violations))


class StorageError(Exception):
    """Raised when the data store rejects a write.

    The underlying database exception is kept as ``__cause__``.
    """

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        self.retryable = retryable
        super().__init__(message)


@dataclass(frozen=True)
class NormalizedError:
    """Standardized error representation for API responses."""

    user_message: str
    error_category: str
    retryable: bool
    http_status: int = 500
    errors: list[dict[str, str]] = field(default_factory=list)
    line: int | None = None

    def to_envelope(self) -> dict[str, Any]:
        """Render as the ``{status: false, ...}`` response body."""
        body: dict[str, Any] = {"status": False, "message": self.user_message}
        if self.errors:
            body["errors"] = self.errors
        if self.line is not None:
            body["line"] = self.line
        return body


def error_location(exc: BaseException) -> int | None:
    """Return the line number of the innermost traceback frame, if any."""
    tb = exc.__traceback__
    if tb is None:
        return None
    while tb.tb_next is not None:
        tb = tb.tb_next
    return tb.tb_lineno


def _location(exc: BaseException) -> int | None:
    return error_location(exc) if settings.show_error_location else None


def normalize_validation_error(exc: PostValidationError) -> NormalizedError:
    """Normalize validation errors into a single user-friendly message."""
    joined = "; ".join(v.message for v in exc.violations)
    log_event(
        logger, "info", Event.POST_VALIDATION_FAILED,
        fields=",".join(v.field for v in exc.violations),
        error_category="validation",
    )
    return NormalizedError(
        user_message=f"Validation failed: {joined}",
        error_category="validation",
        retryable=False,
        http_status=422,
        errors=[v.as_dict() for v in exc.violations],
    )


def normalize_storage_error(
    exc: StorageError,
    *,
    operation: str,
    correlation_id: str | None = None,
) -> NormalizedError:
    """Normalize a failed store write; locked/busy databases map to 503."""
    log_event(
        logger, "error", Event.DB_WRITE_FAILED,
        operation=operation,
        error_category="db",
        retryable=exc.retryable,
        correlation_id=correlation_id or "N/A",
        detail=str(exc),
    )
    return NormalizedError(
        user_message=str(exc),
        error_category="db",
        retryable=exc.retryable,
        http_status=503 if exc.retryable else 500,
        line=_location(exc),
    )


def normalize_unknown_error(
    exc: Exception,
    *,
    operation: str,
    correlation_id: str | None = None,
) -> NormalizedError:
    """Normalize an unexpected error; the raw message is only shown in debug."""
    log_event(
        logger, "exception", Event.UNKNOWN_ERROR,
        operation=operation,
        error_category="unknown",
        correlation_id=correlation_id or "N/A",
        detail=f"{type(exc).__name__}: {exc}",
    )
    if settings.debug:
        message = f"{type(exc).__name__}: {exc}"
    else:
        message = "An unexpected error occurred. Please try again."
    return NormalizedError(
        user_message=message,
        error_category="unknown",
        retryable=False,
        http_status=500,
        line=_location(exc),
    )
