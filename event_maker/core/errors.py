"""Error Hierarchy - typed, categorized exceptions for all Event Maker failure modes.

Invariants:
    - Every error has a code (str), kind (ErrorKind), category, severity
    - ErrorKind is a closed set: validation, timeout, connection, generation, rate_limit
    - to_response() never carries the raw message of an infrastructure error;
      user-facing text comes from core/error_classifier.to_user_message()

Design Decisions:
    - One exception subclass per ErrorKind, each carrying its own payload fields
      (field/value, budget_ms, endpoint/status_code, cause/context, reset_at)
    - ErrorContext as dataclass: operation/attempt/input preview travel with the error
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed taxonomy of failure kinds. Dispatched with `match`."""
    VALIDATION = "validation"
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    GENERATION = "generation"
    RATE_LIMIT = "rate_limit"


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"
    QUOTA = "quota"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    caller_id: str | None = None
    attempt: int | None = None
    input_preview: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class EventMakerError(Exception):
    """Base exception for all Event Maker errors."""

    kind: ErrorKind = ErrorKind.GENERATION

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

    def to_response(self, user_message: str | None = None) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "kind": self.kind.value,
                "message": user_message or self.context.user_message or self.code,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


# ─── Taxonomy (one class per ErrorKind) ─────────────────────────

class InputValidationError(EventMakerError):
    """Caller input failed validation. Permanent, never retried."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self, message: str, field: str, value: Any = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field
        self.value = value


class OperationTimeoutError(EventMakerError):
    """An attempt exceeded its time budget."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, budget_ms: int, context: ErrorContext | None = None):
        super().__init__(
            f"Operation timed out after {budget_ms}ms",
            "TIMEOUT", ErrorCategory.TIMEOUT,
            ErrorSeverity.ERROR, context, 504,
        )
        self.budget_ms = budget_ms


class ConnectionFailureError(EventMakerError):
    """An upstream service could not be reached or answered with a failure status."""

    kind = ErrorKind.CONNECTION

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "CONNECTION_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 503,
        )
        self.endpoint = endpoint
        self.status_code = status_code


class GenerationError(EventMakerError):
    """Generation failed, or an unclassified failure was wrapped here."""

    kind = ErrorKind.GENERATION

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "GENERATION_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 502,
        )
        self.cause = cause


class RateLimitExceededError(EventMakerError):
    """Caller exhausted their generation quota. Terminal, never retried."""

    kind = ErrorKind.RATE_LIMIT

    def __init__(self, reset_at: datetime, context: ErrorContext | None = None):
        super().__init__(
            f"Generation quota exceeded until {reset_at.isoformat()}",
            "RATE_LIMITED", ErrorCategory.QUOTA,
            ErrorSeverity.WARNING, context, 429,
        )
        self.reset_at = reset_at

    def to_response(self, user_message: str | None = None) -> dict:
        response = super().to_response(user_message)
        response["error"]["reset_at"] = self.reset_at.isoformat()
        return response


# ─── Outside the taxonomy ───────────────────────────────────────

class TagConflictError(Exception):
    """Context tag already exists in the identity graph. Callers treat it as success."""

    def __init__(self, label: str):
        super().__init__(f"Context tag already exists: {label}")
        self.label = label


class ResourceNotFoundError(Exception):
    """Requested resource does not exist."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} '{resource_id}' not found")
        self.resource_type = resource_type
        self.resource_id = resource_id


class DatabaseError(Exception):
    """Database operation failed."""

    def __init__(self, message: str, operation: str):
        super().__init__(f"Database {operation} failed: {message}")
        self.operation = operation
