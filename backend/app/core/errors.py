"""Error Hierarchy: typed, categorized exceptions for all Books API failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
      and a fixed http_status
    - Every error records its creation timestamp (UTC) in ErrorContext
    - to_response() always produces {success: false, error, details?, timestamp}
    - details is omitted from the envelope when None

Design Decisions:
    - Single hierarchy with BooksApiError base: FastAPI global handler catches all
      (ADR: uniform error shape)
    - Absence is not an error here: repositories return None, routes raise NotFoundError
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Observability context attached to every error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    book_id: int | None = None


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp used by every response envelope."""
    return datetime.now(timezone.utc).isoformat()


class BooksApiError(Exception):
    """Base exception for all Books API errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        details: Any = None,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.details = details
        self.context = context or ErrorContext()
        self.http_status = http_status

    @property
    def timestamp(self) -> datetime:
        return self.context.timestamp

    def to_response(self) -> dict:
        """Convert to the standard error envelope."""
        body: dict[str, Any] = {"success": False, "error": self.message}
        if self.details is not None:
            body["details"] = self.details
        body["timestamp"] = self.timestamp.isoformat()
        return body


# ─── Client Errors (400-level) ──────────────────────────────────

class BadRequestError(BooksApiError):
    """Input rejected before or by the store."""
    def __init__(
        self, message: str, details: Any = None, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "BAD_REQUEST", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, details, context, 400,
        )


class NotFoundError(BooksApiError):
    """Requested resource does not exist."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, None, context, 404,
        )

    @classmethod
    def for_book(cls, book_id: int) -> "NotFoundError":
        return cls(
            f"Book with ID {book_id} not found", ErrorContext(book_id=book_id),
        )


class ConflictError(BooksApiError):
    """Write would violate a uniqueness rule."""
    def __init__(
        self, message: str, details: Any = None, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, details, context, 409,
        )


# ─── Server Errors (500-level) ──────────────────────────────────

class InternalError(BooksApiError):
    """Unclassified server-side failure."""
    def __init__(
        self, message: str = "Internal server error", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "INTERNAL_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, None, context, 500,
        )


class ServiceUnavailableError(BooksApiError):
    """The database cannot be reached."""
    def __init__(
        self, message: str = "Database is unavailable", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "SERVICE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, None, context, 503,
        )
