"""Resilient Call Executor - retry with exponential backoff around a per-attempt timeout.

Invariants:
    - At most policy.max_retries + 1 attempts
    - Each attempt gets a fresh timeout window (guard nested inside the retry loop)
    - Non-retryable errors (validation, rate limit) re-raise immediately, no backoff wait
    - policy.on_retry(attempt_number, error) runs before every backoff wait
    - Exhausted retries re-raise the last error unchanged
    - Every failed attempt is logged once with operation, attempt, input preview

Design Decisions:
    - `operation` is a factory: a coroutine can only be awaited once, so each attempt
      needs a fresh one
    - No jitter: the delay sequence is part of the contract (1s, 3s, 9s, cap 10s)
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from event_maker.core.error_classifier import classify, is_retryable
from event_maker.core.retry_policy import RetryPolicy
from event_maker.infrastructure.timeout_guard import with_timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_resilience(
    operation: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy | None = None,
    attempt_timeout_ms: int | None = None,
    operation_name: str = "operation",
    input_preview: str | None = None,
) -> T:
    """Run `operation()` until it succeeds, fails permanently, or retries run out."""
    policy = policy or RetryPolicy()
    for attempt in range(policy.max_attempts):
        try:
            if attempt_timeout_ms is None:
                result = await operation()
            else:
                result = await with_timeout(
                    operation(), attempt_timeout_ms,
                    operation_name=operation_name,
                )
            if attempt:
                logger.info(
                    f"{operation_name} succeeded after {attempt + 1} attempts",
                    extra={"operation": operation_name, "attempt": attempt + 1},
                )
            return result
        except Exception as e:
            classified = classify(e, attempt_timeout_ms or 0)
            retryable = is_retryable(classified)
            last_attempt = attempt >= policy.max_retries
            _log_failure(
                operation_name, attempt, e, classified.kind.value, input_preview,
                final=last_attempt or not retryable,
            )
            if not retryable or last_attempt:
                raise
            await _after_failure(policy, attempt, e)


async def _after_failure(
    policy: RetryPolicy, attempt: int, error: BaseException,
) -> None:
    """Notify the hook, then wait out the backoff for this attempt."""
    if policy.on_retry is not None:
        policy.on_retry(attempt + 1, error)
    await _backoff_sleep(policy.delay_ms(attempt))


async def _backoff_sleep(delay_ms: int) -> None:
    await asyncio.sleep(delay_ms / 1000)


def _log_failure(
    operation_name: str,
    attempt: int,
    error: BaseException,
    kind: str,
    input_preview: str | None,
    *,
    final: bool,
) -> None:
    extra = {
        "operation": operation_name,
        "attempt": attempt + 1,
        "error_kind": kind,
        "input_preview": input_preview,
    }
    if final:
        logger.error(
            f"{operation_name} failed on attempt {attempt + 1}, giving up: {error}",
            extra=extra,
        )
    else:
        logger.warning(
            f"{operation_name} failed on attempt {attempt + 1}, retrying: {error}",
            extra=extra,
        )
