"""Event Schemas - verifies API request parsing and the generated config shape.

Tests:
    - goals accepts a comma-separated string or a list
    - to_inputs() fills defaults and carries the creation mode
    - Bounds are enforced at the boundary (relationship_intent, lengths)
    - EventConfig keeps unknown sections and defaults missing lists
"""

import pytest
from pydantic import ValidationError

from event_maker.core.domain_types import EventType, RoleHint
from event_maker.schemas.event_config import EventConfig
from event_maker.schemas.events import (
    BatchIngestRequest,
    EventGenerationRequest,
    ProfileHintsRequest,
)


def test_goals_from_comma_string():
    request = EventGenerationRequest(goals="networking, fundraising ,")
    assert request.goals == ["networking", "fundraising"]


def test_to_inputs_defaults():
    inputs = EventGenerationRequest(
        event_basics="Summit", goals=["a"], type="lite", audience="",
    ).to_inputs()
    assert inputs.event_type is EventType.LITE
    assert inputs.audience == "General Audience"
    assert inputs.tone == "professional"
    assert inputs.relationship_intent == "medium"


def test_relationship_intent_is_bounded():
    with pytest.raises(ValidationError):
        EventGenerationRequest(relationship_intent="extreme")


def test_event_name_length_bounded():
    with pytest.raises(ValidationError):
        EventGenerationRequest(event_name="x" * 201)


def test_profile_hints_request_to_hints():
    hints = ProfileHintsRequest(
        email="ada@example.com", role_hint="speaker", tags=["AI"],
    ).to_hints()
    assert hints.role_hint is RoleHint.SPEAKER
    assert hints.tags == ("AI",)


def test_batch_target_requires_name():
    with pytest.raises(ValidationError):
        BatchIngestRequest(targets=[{"name": ""}])


def test_event_config_keeps_unknown_sections():
    config = EventConfig.model_validate({
        "matchmaking_config": {"enabled": True},
        "content": {"speakers": [{"name": "Grace", "role": "Keynote", "emoji": "x"}]},
    })
    dumped = config.model_dump()
    assert dumped["matchmaking_config"] == {"enabled": True}
    assert dumped["content"]["speakers"][0]["emoji"] == "x"
    assert config.content.schedule == []
    assert config.content.sample_attendees == []


def test_event_config_rejects_speaker_without_name():
    with pytest.raises(ValidationError):
        EventConfig.model_validate({"content": {"speakers": [{"role": "Keynote"}]}})
