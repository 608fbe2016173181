"""RateLimitWindow ORM - one counter row per caller per fixed quota window.

Invariants:
    - (caller_id, window_start) is unique
    - count never exceeds the quota it was checked against
"""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from event_maker.db.base import Base


class RateLimitWindow(Base):
    """Generation counter for a caller within one window."""
    __tablename__ = "rate_limit_windows"
    __table_args__ = (
        UniqueConstraint("caller_id", "window_start", name="uq_rate_limit_window"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    caller_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    window_start: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
