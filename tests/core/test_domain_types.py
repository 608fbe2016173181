"""Domain Types - verifies rich type definitions and enum values.

Tests:
    - NewType wrappers are transparent at runtime
    - RequestState includes both terminal states
    - Sync phases are declared in run order
"""

from event_maker.core.domain_types import (
    CallerId, EventId, IdentityId,
    EventType, RequestState, RoleHint, SyncPhase,
)


def test_identity_types_wrap_str():
    assert CallerId("c-1") == "c-1"
    assert IdentityId("p-1") == "p-1"
    assert EventId("event_abc") == "event_abc"


def test_request_state_terminals():
    assert RequestState.REJECTED.value == "rejected"
    assert RequestState.FAILED.value == "failed"
    assert RequestState.COMPLETED.value == "completed"


def test_sync_phases_in_run_order():
    assert [p.value for p in SyncPhase] == ["attendees", "speakers", "sessions"]


def test_enums_serialize_to_str():
    assert RoleHint.SPEAKER == "speaker"
    assert EventType("lite") is EventType.LITE
