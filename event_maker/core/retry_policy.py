"""Retry Policy - backoff parameters and pure delay math for resilient calls.

Invariants:
    - delay_ms(attempt) = min(initial_delay_ms * multiplier ** attempt, max_delay_ms)
    - Default sequence: 1000, 3000, 9000 ms (capped at 10000)
    - Total attempts = max_retries + 1
"""

from collections.abc import Callable
from dataclasses import dataclass

RetryHook = Callable[[int, BaseException], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Per-call retry configuration."""
    max_retries: int = 3
    initial_delay_ms: int = 1000
    max_delay_ms: int = 10_000
    multiplier: float = 3
    on_retry: RetryHook | None = None

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.initial_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("delays must be >= 0")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_ms(self, attempt: int) -> int:
        """Delay after the zero-based `attempt` failed."""
        return int(min(
            self.initial_delay_ms * (self.multiplier ** attempt),
            self.max_delay_ms,
        ))
