"""Warm-Start Enrichment - verifies best-effort, independent enrichment steps.

Tests:
    - Tags and welcome relationship both written on success
    - A failing tag step does not skip the relationship (and vice versa)
    - No welcome identity, or the welcome identity itself, skips the relationship
    - Failures never raise
"""

from event_maker.core.errors import ConnectionFailureError
from event_maker.core.identity_records import ExternalIdentityRecord, ProfileHints
from event_maker.services.warm_start import WELCOME_SUMMARY, run_warm_start_enrichment

RECORD = ExternalIdentityRecord(id="p-9")
HINTS = ProfileHints(display_name="Ada", tags=("investor",))


async def test_enrichment_writes_tags_and_relationship(graph):
    await run_warm_start_enrichment(graph, RECORD, HINTS, "welcome-1")
    assert graph.tags_assigned["p-9"] == ["role:attendee", "venture_capital"]
    assert graph.relationships == [("welcome-1", "p-9", WELCOME_SUMMARY)]


async def test_tag_failure_does_not_skip_relationship(graph):
    graph.assign_error = ConnectionFailureError("down")
    await run_warm_start_enrichment(graph, RECORD, HINTS, "welcome-1")
    assert graph.tags_assigned == {}
    assert len(graph.relationships) == 1


async def test_relationship_failure_is_swallowed(graph):
    graph.relationship_error = ConnectionFailureError("down")
    await run_warm_start_enrichment(graph, RECORD, HINTS, "welcome-1")
    assert "p-9" in graph.tags_assigned


async def test_relationship_skipped_without_welcome_identity(graph):
    await run_warm_start_enrichment(graph, RECORD, HINTS, None)
    await run_warm_start_enrichment(graph, RECORD, HINTS, "p-9")
    assert graph.relationships == []
    assert graph.calls.count("seed_relationship") == 0
