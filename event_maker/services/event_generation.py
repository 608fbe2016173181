"""Event Generation Service - the generation request state machine.

Flow:
    RECEIVED -> VALIDATED -> RATE_CHECKED -> GENERATING (attempt <-> retry)
    -> GENERATED -> SYNCING_DOWNSTREAM -> COMPLETED
    Validation or quota failure -> REJECTED (no retries, generator never called)
    Retries exhausted -> FAILED (error passed through classify() first)
    Quota store failure -> FAILED (classified the same way, generator never called)

Invariants:
    - Validation is pure and runs before any IO, including the quota check
    - Each generation attempt has its own timeout window
    - Malformed generator output is a GenerationError and is retried like any other
    - Persistence and protocol sync are best-effort: neither can fail a generated result
    - Every error leaving this service is an EventMakerError with context.user_message set
"""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from event_maker.core.domain_types import CallerId, EventId, RequestState
from event_maker.core.error_classifier import classify, to_user_message
from event_maker.core.errors import (
    EventMakerError,
    GenerationError,
    InputValidationError,
    RateLimitExceededError,
)
from event_maker.core.generation_inputs import (
    EventGenerationInputs,
    derive_event_name,
    merge_user_inputs,
    stable_event_id,
    validate_generation_inputs,
)
from event_maker.core.log_fields import preview
from event_maker.core.repository_protocols import (
    EventRepository,
    GenerationCapability,
    IdentityCache,
)
from event_maker.core.retry_policy import RetryPolicy
from event_maker.infrastructure.resilient_call import call_with_resilience
from event_maker.schemas.event_config import EventConfig
from event_maker.services.protocol_sync import ProtocolSyncPipeline, SyncReport
from event_maker.services.rate_limiter import RateLimiterGate

logger = logging.getLogger(__name__)

OPERATION = "generate_event_config"


@dataclass
class GeneratedEvent:
    """Successful generation result handed back to the caller."""
    event_id: EventId
    config: EventConfig
    sync_report: SyncReport | None = None


class EventGenerationService:
    """Orchestrates quota, validation, resilient generation, persistence and sync."""

    def __init__(
        self,
        generator: GenerationCapability,
        gate: RateLimiterGate,
        pipeline: ProtocolSyncPipeline,
        repository: EventRepository | None = None,
        *,
        policy: RetryPolicy | None = None,
        attempt_timeout_ms: int = 120_000,
    ):
        self.generator = generator
        self.gate = gate
        self.pipeline = pipeline
        self.repository = repository
        self.policy = policy or RetryPolicy()
        self.attempt_timeout_ms = attempt_timeout_ms

    async def generate_with_resilience(
        self,
        caller_id: CallerId,
        inputs: EventGenerationInputs,
        policy: RetryPolicy | None = None,
        cache: IdentityCache | None = None,
    ) -> GeneratedEvent:
        label = preview(inputs.event_basics or inputs.event_name)
        _transition(RequestState.RECEIVED, caller_id, label)

        try:
            validate_generation_inputs(inputs)
        except InputValidationError as e:
            logger.warning(
                f"Rejected generation request: {e.message}",
                extra={
                    "operation": OPERATION, "caller_id": caller_id,
                    "input_preview": label, "error_kind": e.kind.value,
                },
            )
            raise _rejected(e, caller_id, label)
        _transition(RequestState.VALIDATED, caller_id, label)

        try:
            await self.gate.check(caller_id)
        except RateLimitExceededError as e:
            raise _rejected(e, caller_id, label)
        except Exception as e:
            logger.error(
                f"Quota check failed: {e}",
                extra={
                    "operation": OPERATION, "caller_id": caller_id,
                    "input_preview": label,
                },
            )
            error = _failed(e, caller_id, label, self.attempt_timeout_ms)
            if error is e:
                raise
            raise error from e
        _transition(RequestState.RATE_CHECKED, caller_id, label)

        _transition(RequestState.GENERATING, caller_id, label)
        try:
            config = await call_with_resilience(
                lambda: self._generate_once(inputs),
                policy=policy or self.policy,
                attempt_timeout_ms=self.attempt_timeout_ms,
                operation_name=OPERATION,
                input_preview=label,
            )
        except Exception as e:
            error = _failed(e, caller_id, label, self.attempt_timeout_ms)
            if error is e:
                raise
            raise error from e

        event_id = stable_event_id(inputs)
        _transition(RequestState.GENERATED, caller_id, label, event_id)

        _transition(RequestState.SYNCING_DOWNSTREAM, caller_id, label, event_id)
        report = await self.pipeline.sync_generated_config(event_id, config, cache)
        await self._persist(event_id, caller_id, inputs, config)

        _transition(RequestState.COMPLETED, caller_id, label, event_id)
        return GeneratedEvent(event_id=event_id, config=config, sync_report=report)

    async def _generate_once(self, inputs: EventGenerationInputs) -> EventConfig:
        raw = await self.generator.generate(inputs.to_prompt_dict())
        try:
            return EventConfig.model_validate(merge_user_inputs(raw, inputs))
        except ValidationError as e:
            raise GenerationError(
                f"Generated configuration failed schema validation "
                f"({e.error_count()} errors)",
                cause=e,
            ) from e

    async def _persist(
        self,
        event_id: EventId,
        caller_id: CallerId,
        inputs: EventGenerationInputs,
        config: EventConfig,
    ) -> None:
        if self.repository is None:
            return
        try:
            await self.repository.save(
                event_id,
                caller_id,
                config.content.event_name or derive_event_name(inputs),
                config.model_dump(mode="json"),
                inputs.event_type.value,
            )
        except Exception as e:
            logger.error(
                f"Failed to save event (non-fatal): {e}",
                extra={"operation": "save_event", "event_id": event_id},
            )


def _annotate(error: EventMakerError, caller_id: CallerId, label: str) -> None:
    error.context.operation = error.context.operation or OPERATION
    error.context.caller_id = caller_id
    error.context.input_preview = label
    error.context.user_message = to_user_message(error)


def _rejected(
    error: EventMakerError, caller_id: CallerId, label: str,
) -> EventMakerError:
    _annotate(error, caller_id, label)
    _transition(RequestState.REJECTED, caller_id, label)
    return error


def _failed(
    exc: Exception, caller_id: CallerId, label: str, budget_ms: int,
) -> EventMakerError:
    error = classify(exc, budget_ms)
    _annotate(error, caller_id, label)
    _transition(RequestState.FAILED, caller_id, label)
    return error


def _transition(
    state: RequestState,
    caller_id: CallerId,
    label: str,
    event_id: EventId | None = None,
) -> None:
    logger.debug(
        f"Generation request -> {state.value}",
        extra={
            "operation": OPERATION,
            "state": state.value,
            "caller_id": caller_id,
            "input_preview": label,
            "event_id": event_id,
        },
    )
