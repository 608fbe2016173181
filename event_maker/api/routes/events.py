"""Event Routes - generation and retrieval of event configurations.

Invariants:
    - X-Caller-Id identifies the caller for quota accounting (authentication is upstream)
    - Generation errors reach the client only as classifier user messages
    - GET returns the persisted config or a structured 404
"""

import logging

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse

from event_maker.api.dependencies import Services, get_services
from event_maker.core.domain_types import CallerId
from event_maker.core.errors import ErrorCategory, ErrorSeverity, ResourceNotFoundError
from event_maker.infrastructure.identity_cache import SessionIdentityCache
from event_maker.schemas.events import EventGenerationRequest, GeneratedEventResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.post(
    "/generate",
    response_model=GeneratedEventResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_event(
    body: EventGenerationRequest,
    caller_id: str = Header(..., alias="X-Caller-Id", min_length=1, max_length=128),
    services: Services = Depends(get_services),
):
    """Generate, sync and store an event configuration."""
    result = await services.generation.generate_with_resilience(
        CallerId(caller_id), body.to_inputs(), cache=SessionIdentityCache(),
    )
    return GeneratedEventResponse(
        event_id=result.event_id,
        config=result.config.model_dump(mode="json"),
        sync=result.sync_report.to_dict() if result.sync_report else None,
    )


@router.get("/{event_id}")
async def get_event(
    event_id: str, services: Services = Depends(get_services),
):
    """Get a stored event configuration."""
    stored = await services.repository.load(event_id)
    if stored is None:
        missing = ResourceNotFoundError("Event", event_id)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "error": {
                    "code": "RESOURCE_NOT_FOUND",
                    "message": str(missing),
                    "category": ErrorCategory.RESOURCE_NOT_FOUND.value,
                    "severity": ErrorSeverity.WARNING.value,
                },
            },
        )
    return stored
