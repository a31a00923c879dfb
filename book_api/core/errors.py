"""Error Hierarchy - typed, categorized exceptions for every user-resource failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are raised before any store call; infrastructure
      errors (500-level) carry the underlying failure text
    - to_response() always produces {"message": str}

Design Decisions:
    - Single hierarchy with BookApiError base: one FastAPI handler serializes all of them
    - Code/category/severity are kept for logs, not for the response body
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
    HASHING = "hashing"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for log records."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class BookApiError(Exception):
    """Base exception for all handler-level errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the REST error body."""
        return {"message": self.message}

    def log_extra(self) -> dict:
        """Fields surfaced by the JSON log formatter."""
        return {
            "error_code": self.code,
            "user_id": self.context.user_id,
            "operation": self.context.operation,
        }


# --- Store signals (raised by the pool, mapped by the handler) ----------------

class StoreError(Exception):
    """A statement failed in the store. str(exc) is the driver's error text."""
    def __init__(self, message: str, operation: str = "unknown"):
        super().__init__(message)
        self.message = message
        self.operation = operation


class DuplicateKeyError(StoreError):
    """The store rejected a write because a unique constraint was violated."""


# --- Domain Errors (400-level) ------------------------------------------------

class ValidationError(BookApiError):
    """Missing or malformed input, detected before any external call."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class NotFoundError(BookApiError):
    """No user row matches the requested id."""
    def __init__(self, user_id: object, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_id = str(user_id)
        super().__init__(
            f"User '{user_id}' not found",
            "USER_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )


class ConflictError(BookApiError):
    """The store rejected a row because its email is already taken."""
    def __init__(
        self, message: str = "Email already exists", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "EMAIL_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


# --- Infrastructure Errors (500-level) ----------------------------------------

class InternalError(BookApiError):
    """Store or hashing failure. The message is the underlying failure text."""
    def __init__(
        self,
        message: str,
        code: str = "DATABASE_ERROR",
        category: ErrorCategory = ErrorCategory.DATABASE,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, category, ErrorSeverity.CRITICAL, context, 500,
        )

    @classmethod
    def from_hashing(
        cls, exc: BaseException, context: ErrorContext | None = None,
    ) -> "InternalError":
        return cls(str(exc), "HASHING_ERROR", ErrorCategory.HASHING, context)
