"""Identity Records - value types for identity resolution and batch sync, plus pure helpers.

Invariants:
    - A fallback record always has is_fallback=True and an id prefixed "local_"
    - SyncBatchResult.records has one entry per input target, aligned by index
    - created_count + failed_count == len(records)
"""

import secrets
from dataclasses import dataclass

from event_maker.core.domain_types import RoleHint

ANONYMOUS_NAME = "Anonymous User"
FALLBACK_PREFIX = "local_"


@dataclass(frozen=True)
class ExternalIdentityRecord:
    """An identity resolved in (or synthesized for) the external graph."""
    id: str
    external_caller_id: str | None = None
    distributed_id: str | None = None
    handle: str | None = None
    is_fallback: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "external_caller_id": self.external_caller_id,
            "distributed_id": self.distributed_id,
            "handle": self.handle,
            "is_fallback": self.is_fallback,
        }


@dataclass(frozen=True)
class ProfileHints:
    """Whatever the caller knows about the person being resolved."""
    email: str | None = None
    display_name: str | None = None
    external_caller_id: str | None = None
    tags: tuple[str, ...] = ()
    role_hint: RoleHint = RoleHint.ATTENDEE


@dataclass(frozen=True)
class SyncTarget:
    """Minimal fields needed to resolve or create one identity."""
    name: str
    email: str | None = None
    tags: tuple[str, ...] = ()
    role_hint: RoleHint = RoleHint.ATTENDEE
    source_id: str | None = None

    def to_hints(self) -> ProfileHints:
        return ProfileHints(
            email=self.email,
            display_name=self.name,
            external_caller_id=self.source_id,
            tags=self.tags,
            role_hint=self.role_hint,
        )


@dataclass(frozen=True)
class SyncBatchResult:
    """Outcome of one bulk sync. Partial failure is reported here, never raised."""
    created_count: int
    failed_count: int
    records: list[ExternalIdentityRecord]

    def to_dict(self) -> dict:
        return {
            "created_count": self.created_count,
            "failed_count": self.failed_count,
            "records": [r.to_dict() for r in self.records],
        }


def best_effort_name(hints: ProfileHints) -> str:
    """display_name, then email, then a fixed placeholder."""
    return (
        (hints.display_name or "").strip()
        or (hints.email or "").strip()
        or ANONYMOUS_NAME
    )


def build_person_fields(hints: ProfileHints, owner_id: str) -> dict:
    """Payload for IdentityGraph.create()."""
    tags = [t for t in hints.tags if t]
    if hints.role_hint is not None and hints.role_hint.value not in tags:
        tags.append(hints.role_hint.value)
    return {
        "owner_id": owner_id,
        "legal_name": best_effort_name(hints),
        "preferred_name": hints.display_name or None,
        "emails": [hints.email] if hints.email else [],
        "tags": tags,
    }


def record_from_person(
    person: dict, external_caller_id: str | None,
) -> ExternalIdentityRecord:
    """Map an identity-graph person payload onto a record. ValueError if it has no id."""
    person_id = (person or {}).get("person_id") or (person or {}).get("id")
    if not person_id:
        raise ValueError("identity graph returned a person without an id")
    return ExternalIdentityRecord(
        id=str(person_id),
        external_caller_id=external_caller_id,
        distributed_id=person.get("did"),
        handle=person.get("handle"),
        is_fallback=False,
    )


def build_fallback_identity(
    external_caller_id: str | None,
) -> ExternalIdentityRecord:
    """Locally synthesized identity used when the graph is unreachable."""
    return ExternalIdentityRecord(
        id=FALLBACK_PREFIX + secrets.token_hex(6),
        external_caller_id=external_caller_id,
        is_fallback=True,
    )


def summarize_batch(records: list[ExternalIdentityRecord]) -> SyncBatchResult:
    failed = sum(1 for r in records if r.is_fallback)
    return SyncBatchResult(
        created_count=len(records) - failed,
        failed_count=failed,
        records=list(records),
    )


def cache_keys(hints: ProfileHints) -> list[str]:
    """Keys under which a resolved identity is cached, most specific first."""
    keys = []
    if hints.email:
        keys.append(f"email:{hints.email.strip().lower()}")
    if hints.external_caller_id:
        keys.append(f"caller:{hints.external_caller_id}")
    return keys
