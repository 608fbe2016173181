"""Identity Routes - resolve one identity or ingest a batch against the identity graph.

Invariants:
    - Both endpoints always answer 200: degradation shows up as is_fallback / failed_count
    - One SessionIdentityCache per request, so duplicates within a batch resolve once
"""

from fastapi import APIRouter, Depends

from event_maker.api.dependencies import Services, get_services
from event_maker.infrastructure.identity_cache import SessionIdentityCache
from event_maker.schemas.events import (
    BatchIngestRequest,
    BatchIngestResponse,
    IdentityResponse,
    ProfileHintsRequest,
)

router = APIRouter(prefix="/api/v1/identities", tags=["identities"])


@router.post("/ensure", response_model=IdentityResponse)
async def ensure_identity(
    body: ProfileHintsRequest, services: Services = Depends(get_services),
):
    record = await services.resolver.ensure_identity(body.to_hints())
    return IdentityResponse(**record.to_dict())


@router.post("/ingest", response_model=BatchIngestResponse)
async def ingest_batch(
    body: BatchIngestRequest, services: Services = Depends(get_services),
):
    result = await services.bulk_sync.ingest_batch(
        [t.to_target() for t in body.targets], SessionIdentityCache(),
    )
    return BatchIngestResponse(**result.to_dict())
