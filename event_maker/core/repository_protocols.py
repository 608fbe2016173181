"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Quota counter and identity cache are injected, never module-level state
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from event_maker.core.identity_records import ExternalIdentityRecord


@dataclass(frozen=True)
class RateLimitDecision:
    """Answer of one atomic check-and-increment."""
    allowed: bool
    reset_at: datetime
    remaining: int = 0


class GenerationCapability(Protocol):
    """Opaque natural-language -> structured event configuration."""
    async def generate(self, inputs: dict) -> dict: ...


class IdentityGraph(Protocol):
    """External identity graph (people, interactions, context tags)."""
    async def search(self, email: str, owner_id: str) -> list[dict]: ...
    async def create(self, fields: dict) -> dict: ...
    async def create_context_tag(self, label: str) -> dict: ...
    async def assign_tags(self, person_id: str, tags: list[str]) -> None: ...
    async def seed_relationship(
        self, from_person_id: str, to_person_id: str, summary: str,
    ) -> None: ...


class RateLimitStore(Protocol):
    """Atomic counter store. Atomicity is the store's job, not the caller's."""
    async def check_and_increment(
        self, caller_id: str, quota: int, window_seconds: int,
    ) -> RateLimitDecision: ...


class EventRepository(Protocol):
    """Persistence for generated event configurations."""
    async def save(
        self, event_id: str, owner_id: str, name: str, config: dict,
        event_type: str,
    ) -> None: ...
    async def load(self, event_id: str) -> dict | None: ...


class IdentityCache(Protocol):
    """Per-caller-session cache. Append-only: the first write for a key wins."""
    def get(self, key: str) -> ExternalIdentityRecord | None: ...
    def put(self, key: str, record: ExternalIdentityRecord) -> None: ...
