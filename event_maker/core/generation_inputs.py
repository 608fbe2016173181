"""Generation Inputs - organizer inputs, validation rules, stable ids and config merging.

Invariants:
    - validate_generation_inputs() is synchronous and does no IO
    - Every rule violation raises InputValidationError naming the offending field
    - stable_event_id() depends only on the inputs, so retries reuse the same id
    - merge_user_inputs() never lets model output override what the organizer typed
"""

import hashlib
from dataclasses import dataclass, field

from event_maker.core.domain_types import EventId, EventType
from event_maker.core.errors import InputValidationError

MIN_EVENT_BASICS_LENGTH = 10
MAX_EVENT_NAME_LENGTH = 50
MAX_TAGLINE_LENGTH = 150


@dataclass(frozen=True)
class EventGenerationInputs:
    """Natural-language inputs handed to the generation capability."""
    event_basics: str = ""
    event_name: str = ""
    event_date: str = ""
    event_location: str = ""
    goals: list[str] = field(default_factory=list)
    audience: str = "General Audience"
    relationship_intent: str = "medium"
    tone: str = "professional"
    event_type: EventType = EventType.ARCHITECT

    def to_prompt_dict(self) -> dict:
        return {
            "event_basics": self.event_basics,
            "explicit_event_name": self.event_name,
            "event_date": self.event_date,
            "event_location": self.event_location,
            "goals": list(self.goals),
            "audience": self.audience,
            "relationship_intent": self.relationship_intent,
            "tone": self.tone,
        }


def parse_goals(raw: str | list[str] | None) -> list[str]:
    """Accept 'a, b ,c' or a list; drop blanks."""
    if raw is None:
        return []
    items = raw.split(",") if isinstance(raw, str) else raw
    return [g.strip() for g in items if g and g.strip()]


def validate_generation_inputs(inputs: EventGenerationInputs) -> None:
    """Raise InputValidationError on the first violated rule."""
    basics = inputs.event_basics.strip()
    if inputs.event_type == EventType.ARCHITECT and len(basics) < MIN_EVENT_BASICS_LENGTH:
        raise InputValidationError(
            f"Please describe your event in more detail ({MIN_EVENT_BASICS_LENGTH}+ chars)",
            "event_basics", inputs.event_basics,
        )
    if inputs.event_type == EventType.LITE and not inputs.event_name.strip():
        raise InputValidationError(
            "Event Name is required", "event_name", inputs.event_name,
        )
    if not inputs.event_date.strip():
        raise InputValidationError(
            "Event date is required", "event_date", inputs.event_date,
        )
    if not inputs.event_location.strip():
        raise InputValidationError(
            "Event location is required", "event_location", inputs.event_location,
        )
    if not parse_goals(inputs.goals):
        raise InputValidationError(
            "At least one goal is required", "goals", inputs.goals,
        )


def stable_event_id(inputs: EventGenerationInputs) -> EventId:
    fingerprint = "|".join([
        inputs.event_basics,
        inputs.event_date,
        inputs.event_location,
        ",".join(inputs.goals),
        inputs.audience,
        inputs.tone,
    ])
    digest = hashlib.sha256(fingerprint.encode("utf-8")).hexdigest()
    return EventId(f"event_{digest[:12]}")


def derive_event_name(inputs: EventGenerationInputs) -> str:
    """Explicit name wins; otherwise the first sentence of the description."""
    if inputs.event_name.strip():
        return inputs.event_name.strip()[:MAX_EVENT_NAME_LENGTH]
    first_sentence = inputs.event_basics.split(".")[0].strip()
    return (first_sentence or "New Event")[:MAX_EVENT_NAME_LENGTH]


def merge_user_inputs(config: dict, inputs: EventGenerationInputs) -> dict:
    """Return a copy of the generated config with organizer inputs applied."""
    merged = dict(config)
    content = dict(merged.get("content") or {})
    content["event_name"] = derive_event_name(inputs)
    if inputs.event_basics.strip():
        content["tagline"] = inputs.event_basics.strip()[:MAX_TAGLINE_LENGTH]
    content["date"] = inputs.event_date
    content["location"] = inputs.event_location
    merged["content"] = content

    goals = parse_goals(inputs.goals)
    if goals:
        merged["primary_goals"] = goals

    branding = dict(merged.get("branding") or {})
    if inputs.tone:
        keywords = list(branding.get("tone_keywords") or [])
        branding["tone_keywords"] = [inputs.tone, *keywords[1:]]
    merged["branding"] = branding
    return merged
