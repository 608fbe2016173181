"""Session Identity Cache - append-only identity lookups scoped to one caller session.

Invariants:
    - put() never overwrites: the first record stored under a key wins, so a late
      write from an abandoned operation cannot replace a newer answer
    - One instance per caller session; nothing is shared across sessions
"""

from event_maker.core.identity_records import ExternalIdentityRecord


class SessionIdentityCache:
    """In-memory IdentityCache implementation."""

    def __init__(self):
        self._records: dict[str, ExternalIdentityRecord] = {}

    def get(self, key: str) -> ExternalIdentityRecord | None:
        return self._records.get(key)

    def put(self, key: str, record: ExternalIdentityRecord) -> None:
        self._records.setdefault(key, record)

    def __len__(self) -> int:
        return len(self._records)
