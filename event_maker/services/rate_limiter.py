"""Rate Limiter Gate - caller-scoped quota check in front of the generation call.

Invariants:
    - One atomic check_and_increment per gated request
    - Quota exceeded -> RateLimitExceededError(reset_at), never retried
    - Store failures propagate unchanged; EventGenerationService classifies them
"""

import logging

from event_maker.core.domain_types import CallerId
from event_maker.core.errors import ErrorContext, RateLimitExceededError
from event_maker.core.repository_protocols import RateLimitDecision, RateLimitStore

logger = logging.getLogger(__name__)


class RateLimiterGate:
    """Rolling quota (default 10 per hour) over an external counter store."""

    def __init__(
        self, store: RateLimitStore, quota: int = 10, window_seconds: int = 3600,
    ):
        self.store = store
        self.quota = quota
        self.window_seconds = window_seconds

    async def check(self, caller_id: CallerId) -> RateLimitDecision:
        decision = await self.store.check_and_increment(
            caller_id, self.quota, self.window_seconds,
        )
        if not decision.allowed:
            logger.warning(
                f"Generation quota exceeded, resets at {decision.reset_at.isoformat()}",
                extra={"operation": "rate_limit", "caller_id": caller_id},
            )
            raise RateLimitExceededError(
                decision.reset_at,
                context=ErrorContext(operation="rate_limit", caller_id=caller_id),
            )
        return decision
