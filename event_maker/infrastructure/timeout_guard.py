"""Timeout Guard - races one awaitable against a per-attempt deadline.

Invariants:
    - Raises OperationTimeoutError(budget_ms) once the budget elapses, regardless of
      how long the wrapped operation would really take
    - cancel_on_timeout=True (default): the operation is cancelled
    - cancel_on_timeout=False: the operation keeps running unobserved; a late result
      or failure is logged, never raised, and never reaches the caller
    - Cancelling the caller cancels the wrapped operation too

Design Decisions:
    - asyncio supports real cancellation, so it is the default; abandonment is opt-in
      for operations whose side effects must be allowed to finish
    - _in_flight anchors timed-out tasks until they settle (the event loop only
      keeps weak references to tasks)
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from event_maker.core.errors import ErrorContext, OperationTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_in_flight: set[asyncio.Future] = set()


async def with_timeout(
    awaitable: Awaitable[T],
    budget_ms: int,
    *,
    operation_name: str = "operation",
    cancel_on_timeout: bool = True,
) -> T:
    """Await `awaitable` for at most `budget_ms` milliseconds."""
    task = asyncio.ensure_future(awaitable)
    try:
        done, _ = await asyncio.wait({task}, timeout=budget_ms / 1000)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    _in_flight.add(task)
    task.add_done_callback(_settle_late(operation_name, budget_ms))
    if cancel_on_timeout:
        task.cancel()
    logger.warning(
        f"{operation_name} exceeded {budget_ms}ms budget",
        extra={
            "operation": operation_name,
            "budget_ms": budget_ms,
            "cancelled": cancel_on_timeout,
        },
    )
    raise OperationTimeoutError(
        budget_ms, context=ErrorContext(operation=operation_name),
    )


def pending_abandoned() -> int:
    """Number of timed-out operations that have not settled yet."""
    return len(_in_flight)


def _settle_late(operation_name: str, budget_ms: int):
    def _on_done(task: asyncio.Future) -> None:
        _in_flight.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                f"{operation_name} failed after its {budget_ms}ms budget: {exc}",
                extra={"operation": operation_name, "budget_ms": budget_ms},
            )
        else:
            logger.info(
                f"{operation_name} completed after its {budget_ms}ms budget",
                extra={"operation": operation_name, "budget_ms": budget_ms},
            )
    return _on_done
