"""Background Task Registry - fire-and-forget tasks that are still accounted for.

Invariants:
    - spawn() never raises into the caller and never awaits the task
    - A failed task is logged once; its exception never propagates
    - drain() waits at most `timeout_seconds`, then cancels whatever is left

Design Decisions:
    - One registry per application (created in the FastAPI lifespan), not a module global
    - Completion before process exit is best-effort: drain() runs on shutdown, a hard
      kill still loses pending work
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundTaskRegistry:
    """Holds strong references to spawned tasks until they finish."""

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self, timeout_seconds: float) -> int:
        """Wait for pending tasks; return how many had to be cancelled."""
        if not self._tasks:
            return 0
        _, still_pending = await asyncio.wait(
            set(self._tasks), timeout=timeout_seconds,
        )
        for task in still_pending:
            task.cancel()
        if still_pending:
            logger.warning(
                f"Cancelled {len(still_pending)} background task(s) on shutdown",
            )
        return len(still_pending)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                f"Background task {task.get_name()} failed: {exc}",
                extra={"operation": task.get_name()},
            )
