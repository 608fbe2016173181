"""SQL Rate Limit Store - atomic check-and-increment on a per-caller window counter.

Invariants:
    - Check and increment happen in one transaction under a row lock (SELECT ... FOR UPDATE)
    - A denied check does not increment the counter
    - reset_at is the end of the caller's current window

Design Decisions:
    - Fixed windows aligned to the epoch (window_start = floor(now / window)); a caller
      can spend two quotas back to back across a window boundary
    - A concurrent first insert for the same window loses on the unique constraint and
      is retried once against the row that won
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from event_maker.core.errors import DatabaseError
from event_maker.core.repository_protocols import RateLimitDecision
from event_maker.infrastructure.database import DatabaseSessionManager
from event_maker.models.rate_limit_window import RateLimitWindow

logger = logging.getLogger(__name__)


def window_bounds(now: datetime, window_seconds: int) -> tuple[datetime, datetime]:
    """(start, end) of the fixed window containing `now`."""
    start_ts = (int(now.timestamp()) // window_seconds) * window_seconds
    start = datetime.fromtimestamp(start_ts, tz=timezone.utc)
    return start, start + timedelta(seconds=window_seconds)


class SqlRateLimitStore:
    """RateLimitStore backed by the rate_limit_windows table."""

    def __init__(
        self,
        db: DatabaseSessionManager,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.db = db
        self._clock = clock

    async def check_and_increment(
        self, caller_id: str, quota: int, window_seconds: int,
    ) -> RateLimitDecision:
        window_start, reset_at = window_bounds(self._clock(), window_seconds)
        try:
            return await self._increment(caller_id, quota, window_start, reset_at)
        except DatabaseError:
            logger.info(
                "Rate limit window created concurrently, retrying",
                extra={"caller_id": caller_id},
            )
            return await self._increment(caller_id, quota, window_start, reset_at)

    async def _increment(
        self,
        caller_id: str,
        quota: int,
        window_start: datetime,
        reset_at: datetime,
    ) -> RateLimitDecision:
        async with self.db.session() as session:
            async with session.begin():
                result = await session.execute(
                    select(RateLimitWindow)
                    .where(
                        RateLimitWindow.caller_id == caller_id,
                        RateLimitWindow.window_start == window_start,
                    )
                    .with_for_update(),
                )
                row = result.scalar_one_or_none()
                if row is None:
                    row = RateLimitWindow(
                        caller_id=caller_id, window_start=window_start, count=0,
                    )
                    session.add(row)
                if row.count >= quota:
                    return RateLimitDecision(
                        allowed=False, reset_at=reset_at, remaining=0,
                    )
                row.count += 1
                remaining = quota - row.count
        return RateLimitDecision(
            allowed=True, reset_at=reset_at, remaining=remaining,
        )
