"""Event Config Schemas - Pydantic shape of the structured configuration the generator emits.

Invariants:
    - Unknown fields are preserved (extra="allow"): the generator may add sections
    - content.speakers / schedule / sample_attendees default to empty lists
    - handle/did on speakers and attendees are filled in by protocol sync

Design Decisions:
    - Only the fields the service reads are typed; everything else passes through untouched
"""

from pydantic import BaseModel, ConfigDict, Field


class _Open(BaseModel):
    model_config = ConfigDict(extra="allow")


class Speaker(_Open):
    name: str
    role: str = ""
    company: str | None = None
    bio: str | None = None
    handle: str | None = None
    did: str | None = None


class ScheduleItem(_Open):
    id: str
    title: str
    start_time: str | None = None
    end_time: str | None = None
    format: str | None = None
    track: str | None = None
    speakers: list[str] = Field(default_factory=list)


class SampleAttendee(_Open):
    person_id: str
    legal_name: str | None = None
    preferred_name: str | None = None
    emails: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    handle: str | None = None
    did: str | None = None


class EventContent(_Open):
    event_name: str | None = None
    tagline: str | None = None
    date: str | None = None
    location: str | None = None
    speakers: list[Speaker] = Field(default_factory=list)
    schedule: list[ScheduleItem] = Field(default_factory=list)
    sample_attendees: list[SampleAttendee] = Field(default_factory=list)


class EventConfig(_Open):
    """Structured event configuration."""
    primary_goals: list[str] = Field(default_factory=list)
    content: EventContent = Field(default_factory=EventContent)
    branding: dict = Field(default_factory=dict)
    design_notes: str | None = None
