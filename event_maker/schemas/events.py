"""Event & Identity Schemas - Pydantic models with field-level validation for API boundaries.

Invariants:
    - Request models only check shape and bounds; business rules (min description
      length, required date/location/goals) live in core/generation_inputs so the
      Python API and the HTTP API reject the same inputs with the same messages
    - goals accepts "a, b" or ["a", "b"]
    - Response models mirror core dataclasses one-to-one
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from event_maker.core.domain_types import EventType, RoleHint
from event_maker.core.generation_inputs import EventGenerationInputs, parse_goals
from event_maker.core.identity_records import ProfileHints, SyncTarget


class EventGenerationRequest(BaseModel):
    """Organizer form submission."""
    event_basics: str = Field("", max_length=10_000)
    event_name: str = Field("", max_length=200)
    event_date: str = Field("", max_length=100)
    event_location: str = Field("", max_length=300)
    goals: list[str] = Field(default_factory=list)
    audience: str = Field("General Audience", max_length=300)
    relationship_intent: Literal["low", "medium", "high"] = "medium"
    tone: str = Field("professional", max_length=50)
    type: EventType = EventType.ARCHITECT

    @field_validator("goals", mode="before")
    @classmethod
    def split_goals(cls, v):
        if isinstance(v, str) or v is None:
            return parse_goals(v)
        return v

    def to_inputs(self) -> EventGenerationInputs:
        return EventGenerationInputs(
            event_basics=self.event_basics,
            event_name=self.event_name,
            event_date=self.event_date,
            event_location=self.event_location,
            goals=parse_goals(self.goals),
            audience=self.audience or "General Audience",
            relationship_intent=self.relationship_intent,
            tone=self.tone or "professional",
            event_type=self.type,
        )


class ProfileHintsRequest(BaseModel):
    """Hints for resolving one identity."""
    email: str | None = Field(None, max_length=320)
    display_name: str | None = Field(None, max_length=200)
    external_caller_id: str | None = Field(None, max_length=128)
    tags: list[str] = Field(default_factory=list, max_length=50)
    role_hint: RoleHint = RoleHint.ATTENDEE

    def to_hints(self) -> ProfileHints:
        return ProfileHints(
            email=self.email,
            display_name=self.display_name,
            external_caller_id=self.external_caller_id,
            tags=tuple(self.tags),
            role_hint=self.role_hint,
        )


class SyncTargetRequest(BaseModel):
    """One entry of a bulk ingest."""
    name: str = Field(min_length=1, max_length=200)
    email: str | None = Field(None, max_length=320)
    tags: list[str] = Field(default_factory=list, max_length=50)
    role_hint: RoleHint = RoleHint.ATTENDEE
    source_id: str | None = Field(None, max_length=128)

    def to_target(self) -> SyncTarget:
        return SyncTarget(
            name=self.name,
            email=self.email,
            tags=tuple(self.tags),
            role_hint=self.role_hint,
            source_id=self.source_id,
        )


class BatchIngestRequest(BaseModel):
    targets: list[SyncTargetRequest] = Field(max_length=1000)


class IdentityResponse(BaseModel):
    id: str
    external_caller_id: str | None = None
    distributed_id: str | None = None
    handle: str | None = None
    is_fallback: bool


class BatchIngestResponse(BaseModel):
    created_count: int
    failed_count: int
    records: list[IdentityResponse]


class GeneratedEventResponse(BaseModel):
    event_id: str
    config: dict
    sync: dict | None = None
