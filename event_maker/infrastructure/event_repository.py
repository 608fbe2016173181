"""SQL Event Repository - save/load generated event configurations.

Invariants:
    - save() upserts by slug for the owning caller; updated_at refreshed on every save
    - A slug owned by another caller is never overwritten: save() raises DatabaseError
    - load() returns the stored config dict, or None when the slug is unknown
    - SQLAlchemy failures surface as DatabaseError (via DatabaseSessionManager)
"""

from datetime import datetime, timezone

from sqlalchemy import select

from event_maker.core.domain_types import EventStatus
from event_maker.core.errors import DatabaseError
from event_maker.infrastructure.database import DatabaseSessionManager
from event_maker.models.event import Event


class SqlEventRepository:
    """EventRepository backed by the events table."""

    def __init__(self, db: DatabaseSessionManager):
        self.db = db

    async def save(
        self, event_id: str, owner_id: str, name: str, config: dict,
        event_type: str,
    ) -> None:
        async with self.db.session() as session:
            existing = await session.get(Event, event_id)
            if existing is None:
                session.add(Event(
                    slug=event_id,
                    name=name[:200],
                    owner_id=owner_id,
                    event_type=event_type,
                    status=EventStatus.DRAFT.value,
                    config=config,
                ))
            elif existing.owner_id != owner_id:
                raise DatabaseError(
                    f"event {event_id} belongs to another owner", "save",
                )
            else:
                existing.name = name[:200]
                existing.config = config
                existing.updated_at = datetime.now(timezone.utc)
            await session.commit()

    async def load(self, event_id: str) -> dict | None:
        async with self.db.session() as session:
            result = await session.execute(
                select(Event).where(Event.slug == event_id),
            )
            event = result.scalar_one_or_none()
            if event is None:
                return None
            return {
                "event_id": event.slug,
                "name": event.name,
                "owner_id": event.owner_id,
                "event_type": event.event_type,
                "status": event.status,
                "config": event.config,
            }
