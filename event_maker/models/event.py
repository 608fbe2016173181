"""Event ORM - persists generated event configurations.

Invariants:
    - slug is the stable event id (event_<sha256[:12]>) and the primary key
    - config stores the merged configuration as-is (JSON)
    - Saving the same slug twice overwrites the config (regeneration is idempotent)
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from event_maker.db.base import Base


class Event(Base):
    """Generated event owned by one caller."""
    __tablename__ = "events"

    slug: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    event_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="architect",
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="draft",
    )
    config: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
