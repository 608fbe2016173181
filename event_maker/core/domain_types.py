"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - CallerId, IdentityId, EventId wrap str; never pass a bare str where one is expected
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

CallerId = NewType("CallerId", str)
IdentityId = NewType("IdentityId", str)
EventId = NewType("EventId", str)


# ─── Enums ───────────────────────────────────────────────────────

class RequestState(str, Enum):
    """Lifecycle of one generation request. REJECTED and FAILED are terminal."""
    RECEIVED = "received"
    VALIDATED = "validated"
    RATE_CHECKED = "rate_checked"
    GENERATING = "generating"
    GENERATED = "generated"
    SYNCING_DOWNSTREAM = "syncing_downstream"
    COMPLETED = "completed"
    REJECTED = "rejected"
    FAILED = "failed"


class RoleHint(str, Enum):
    """Role a sync target plays at the event."""
    ATTENDEE = "attendee"
    SPEAKER = "speaker"


class SyncPhase(str, Enum):
    """Independently fault-isolated phases of protocol sync, in run order."""
    ATTENDEES = "attendees"
    SPEAKERS = "speakers"
    SESSIONS = "sessions"


class EventType(str, Enum):
    """Creation mode chosen by the organizer."""
    ARCHITECT = "architect"
    LITE = "lite"


class EventStatus(str, Enum):
    """Persisted event lifecycle - maps to DB `status` column."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"
