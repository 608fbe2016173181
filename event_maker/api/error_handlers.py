"""Error Handlers - global exception handlers for the Event Maker API.

Invariants:
    - EventMakerError -> structured JSON with the classifier's user message only
    - RequestValidationError -> field-level error details
    - Exception (catch-all) -> never leaks internal details
    - Rate-limit responses carry reset_at and a Retry-After header

Design Decisions:
    - Three-layer handler: taxonomy (EventMakerError), validation (Pydantic), catch-all
"""

import logging
import math
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from event_maker.core.error_classifier import to_user_message
from event_maker.core.errors import (
    ErrorSeverity, EventMakerError, RateLimitExceededError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:
    """Register taxonomy error handler."""

    @app.exception_handler(EventMakerError)
    async def event_maker_error_handler(request: Request, exc: EventMakerError):
        """Handle all taxonomy errors."""
        logger.info(
            f"EventMakerError on {request.url.path}: {exc.code}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        headers = None
        if isinstance(exc, RateLimitExceededError):
            seconds = (exc.reset_at - datetime.now(timezone.utc)).total_seconds()
            headers = {"Retry-After": str(max(0, math.ceil(seconds)))}
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(to_user_message(exc)),
            headers=headers,
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all - never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred. Please try again.",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "kind": "validation",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.WARNING.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
