"""Integration Tests: EventGenerationService - the generation request state machine.

Invariants:
    - Happy path: validate, quota, one generator call, sync, persist
    - Transient generator failures are retried with backoff; callers see one success
    - Invalid input is rejected before any IO (no quota use, no generator call)
    - Quota exhaustion is rejected without calling the generator
    - A failing quota store surfaces as a classified error, generator untouched
    - Exhausted retries surface a classified error carrying a user message
    - Malformed generator output is retried like any other generation failure
    - Persistence failure never fails a generated result

Design Decisions:
    - Real resolver/orchestrator/pipeline over the fake graph: exercises the whole
      generate-then-sync flow, only the network edges are faked
"""

import asyncio

import pytest

from event_maker.core.domain_types import CallerId, EventType
from event_maker.core.errors import (
    ConnectionFailureError,
    DatabaseError,
    GenerationError,
    InputValidationError,
    OperationTimeoutError,
    RateLimitExceededError,
)
from event_maker.core.generation_inputs import EventGenerationInputs, stable_event_id
from event_maker.core.retry_policy import RetryPolicy
from event_maker.services.event_generation import EventGenerationService
from event_maker.services.rate_limiter import RateLimiterGate

from tests.services.fakes import (
    RESET_AT,
    SAMPLE_CONFIG,
    FakeEventRepository,
    FakeGenerator,
    FakeRateLimitStore,
)

CALLER = CallerId("caller-1")

INPUTS = EventGenerationInputs(
    event_basics="Founders summit for climate tech. Two days in Lisbon.",
    event_date="2026-05-01",
    event_location="Lisbon",
    goals=["networking", "fundraising"],
    tone="playful",
)


def _service(pipeline, generator, store=None, repository=None, quota=10, **kwargs):
    gate = RateLimiterGate(store or FakeRateLimitStore(), quota=quota)
    return EventGenerationService(
        generator, gate, pipeline, repository, **kwargs,
    )


# ==============================================================================
# Happy path
# ==============================================================================


async def test_generates_syncs_and_persists(pipeline, graph, backoff_delays):
    generator = FakeGenerator()
    repository = FakeEventRepository()
    service = _service(pipeline, generator, repository=repository)

    result = await service.generate_with_resilience(CALLER, INPUTS)

    assert result.event_id == stable_event_id(INPUTS)
    assert len(generator.calls) == 1
    assert generator.calls[0]["event_location"] == "Lisbon"
    assert backoff_delays == []

    content = result.config.content
    assert content.event_name == "Founders summit for climate tech"
    assert content.location == "Lisbon"
    assert result.config.primary_goals == ["networking", "fundraising"]
    assert result.config.branding["tone_keywords"] == ["playful", "warm"]
    # Unknown sections survive validation untouched
    assert result.config.model_dump()["matchmaking_config"]["enabled"] is True

    assert result.sync_report.attendees.created_count == 2
    assert result.sync_report.sessions_synced == 2

    saved = repository.saved[result.event_id]
    assert saved["owner_id"] == CALLER
    assert saved["event_type"] == EventType.ARCHITECT.value
    # Persisted after sync, so merged handles are stored
    assert saved["config"]["content"]["speakers"][0]["handle"].endswith(".bsky.social")


async def test_transient_failures_are_retried(pipeline, backoff_delays):
    generator = FakeGenerator([
        ConnectionFailureError("reset"),
        ConnectionFailureError("reset"),
    ])
    service = _service(pipeline, generator)

    result = await service.generate_with_resilience(CALLER, INPUTS)

    assert result.event_id.startswith("event_")
    assert len(generator.calls) == 3
    assert backoff_delays == [1000, 3000]


async def test_same_inputs_reuse_event_id(pipeline, backoff_delays):
    service = _service(pipeline, FakeGenerator())
    first = await service.generate_with_resilience(CALLER, INPUTS)
    second = await service.generate_with_resilience(CALLER, INPUTS)
    assert first.event_id == second.event_id


# ==============================================================================
# Rejections
# ==============================================================================


async def test_invalid_input_rejected_before_any_io(pipeline, graph, backoff_delays):
    generator = FakeGenerator()
    store = FakeRateLimitStore()
    service = _service(pipeline, generator, store=store)
    bad = EventGenerationInputs(
        event_basics="Founders summit for climate tech.",
        event_date="",
        event_location="Lisbon",
        goals=["networking"],
    )

    with pytest.raises(InputValidationError) as exc:
        await service.generate_with_resilience(CALLER, bad)

    assert exc.value.field == "event_date"
    assert exc.value.context.user_message == (
        "Invalid event_date: Event date is required"
    )
    assert generator.calls == []
    assert store.calls == []
    assert graph.calls == []


async def test_quota_exhausted_rejects_without_generation(pipeline, backoff_delays):
    generator = FakeGenerator()
    store = FakeRateLimitStore()
    service = _service(pipeline, generator, store=store, quota=1)

    await service.generate_with_resilience(CALLER, INPUTS)
    with pytest.raises(RateLimitExceededError) as exc:
        await service.generate_with_resilience(CALLER, INPUTS)

    assert exc.value.reset_at == RESET_AT
    assert exc.value.context.caller_id == CALLER
    assert "generation limit" in exc.value.context.user_message
    assert len(generator.calls) == 1
    assert store.counts[CALLER] == 1


async def test_quota_store_failure_is_classified(pipeline, backoff_delays):
    generator = FakeGenerator()
    store = FakeRateLimitStore()
    store.error = DatabaseError("Connection or operational error", "execute")
    service = _service(pipeline, generator, store=store)

    with pytest.raises(GenerationError) as exc:
        await service.generate_with_resilience(CALLER, INPUTS)

    assert isinstance(exc.value.__cause__, DatabaseError)
    assert exc.value.context.caller_id == CALLER
    assert exc.value.context.user_message.startswith("We're having trouble")
    assert generator.calls == []


# ==============================================================================
# Failures
# ==============================================================================


async def test_exhausted_retries_surface_classified_error(pipeline, backoff_delays):
    generator = FakeGenerator([OperationTimeoutError(120_000)] * 4)
    service = _service(pipeline, generator)

    with pytest.raises(OperationTimeoutError) as exc:
        await service.generate_with_resilience(CALLER, INPUTS)

    assert len(generator.calls) == 4
    assert backoff_delays == [1000, 3000, 9000]
    assert exc.value.context.user_message == "Request took too long. Please try again."
    assert exc.value.context.caller_id == CALLER


async def test_unknown_failure_wrapped_as_generation_error(pipeline, backoff_delays):
    generator = FakeGenerator([KeyError("content")])
    service = _service(pipeline, generator, policy=RetryPolicy(max_retries=0))

    with pytest.raises(GenerationError) as exc:
        await service.generate_with_resilience(CALLER, INPUTS)

    assert isinstance(exc.value.cause, KeyError)
    assert isinstance(exc.value.__cause__, KeyError)
    assert exc.value.context.user_message.startswith("We're having trouble")


async def test_per_call_policy_overrides_default(pipeline, backoff_delays):
    generator = FakeGenerator([ConnectionFailureError("down")] * 3)
    service = _service(pipeline, generator)

    with pytest.raises(ConnectionFailureError):
        await service.generate_with_resilience(
            CALLER, INPUTS, policy=RetryPolicy(max_retries=1, initial_delay_ms=10),
        )

    assert len(generator.calls) == 2
    assert backoff_delays == [10]


async def test_malformed_output_is_retried(pipeline, backoff_delays):
    malformed = {"content": {"speakers": [{"role": "no name"}]}}
    generator = FakeGenerator([malformed])
    service = _service(pipeline, generator)

    result = await service.generate_with_resilience(CALLER, INPUTS)

    assert len(generator.calls) == 2
    assert result.config.content.speakers[0].name == "Grace Hopper"


async def test_hung_generation_attempt_is_cut_off(pipeline, backoff_delays):
    async def hang():
        await asyncio.sleep(5)
        return SAMPLE_CONFIG

    generator = FakeGenerator([hang])
    service = _service(pipeline, generator, attempt_timeout_ms=50)

    result = await service.generate_with_resilience(CALLER, INPUTS)

    assert len(generator.calls) == 2
    assert result.event_id == stable_event_id(INPUTS)


async def test_persistence_failure_is_not_fatal(pipeline, backoff_delays):
    service = _service(
        pipeline, FakeGenerator(), repository=FakeEventRepository(fail=True),
    )
    result = await service.generate_with_resilience(CALLER, INPUTS)
    assert result.event_id == stable_event_id(INPUTS)


async def test_graph_outage_does_not_fail_generation(pipeline, graph, backoff_delays):
    graph.create_error = ConnectionFailureError("graph down")
    graph.fail_tags_for = {
        f"{stable_event_id(INPUTS)}:Opening Keynote",
        f"{stable_event_id(INPUTS)}:Climate Panel",
    }
    service = _service(pipeline, FakeGenerator())

    result = await service.generate_with_resilience(CALLER, INPUTS)

    assert result.sync_report.attendees.failed_count == 2
    assert result.sync_report.speakers.failed_count == 1
    assert result.sync_report.sessions_failed == 2
