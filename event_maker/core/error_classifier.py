"""Error Classifier - maps any exception onto the closed ErrorKind taxonomy.

Invariants:
    - Only ConnectionError, or an OSError whose message reads as a network failure,
      becomes CONNECTION; other OSErrors (missing file, permissions) are unknown failures
    - classify() never returns None and never drops the original exception:
      unknown failures become GenerationError(cause=exc)
    - is_retryable(): CONNECTION, TIMEOUT, GENERATION retry; VALIDATION, RATE_LIMIT never do
    - to_user_message() output contains no stack traces, endpoints or internal ids
"""

import asyncio

from event_maker.core.errors import (
    ConnectionFailureError,
    ErrorKind,
    EventMakerError,
    GenerationError,
    OperationTimeoutError,
)

_RETRYABLE_MARKERS = (
    "network",
    "timeout",
    "timed out",
    "econnrefused",
    "connection refused",
    "fetch",
)

_MAX_FIELD_LABEL = 40


def classify(exc: BaseException, budget_ms: int = 0) -> EventMakerError:
    """Return exc as a taxonomy error, wrapping it when it is not one already."""
    if isinstance(exc, EventMakerError):
        return exc
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return OperationTimeoutError(budget_ms)
    if isinstance(exc, ConnectionError) or (
        isinstance(exc, OSError) and _mentions_transient_failure(exc)
    ):
        return ConnectionFailureError(str(exc) or type(exc).__name__)
    return GenerationError(str(exc) or type(exc).__name__, cause=exc)


def is_retryable(error: BaseException) -> bool:
    """Whether another attempt could plausibly succeed."""
    if not isinstance(error, EventMakerError):
        return _mentions_transient_failure(error)
    match error.kind:
        case ErrorKind.CONNECTION | ErrorKind.TIMEOUT | ErrorKind.GENERATION:
            return True
        case ErrorKind.VALIDATION | ErrorKind.RATE_LIMIT:
            return False


def _mentions_transient_failure(error: BaseException) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in _RETRYABLE_MARKERS)


def to_user_message(error: EventMakerError) -> str:
    """Stable, non-leaking message for the end user."""
    match error.kind:
        case ErrorKind.VALIDATION:
            field = getattr(error, "field", None) or "input"
            return f"Invalid {field[:_MAX_FIELD_LABEL]}: {error.message}"
        case ErrorKind.TIMEOUT:
            return "Request took too long. Please try again."
        case ErrorKind.CONNECTION:
            return "Connection lost. Please check your internet and try again."
        case ErrorKind.GENERATION:
            return "We're having trouble generating your event. Please try again."
        case ErrorKind.RATE_LIMIT:
            return "You've reached the generation limit. Please try again later."
