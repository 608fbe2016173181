"""Warm-Start Enrichment - best-effort population of a freshly created identity.

Invariants:
    - Runs as a background task; the resolution result never depends on it
    - Tag assignment and welcome relationship are independent: one failing does not
      skip the other
    - Failures are logged, never raised
"""

import logging

from event_maker.core.identity_records import ExternalIdentityRecord, ProfileHints
from event_maker.core.repository_protocols import IdentityGraph
from event_maker.core.warm_start_tags import infer_interest_tags
from event_maker.infrastructure.timeout_guard import with_timeout

logger = logging.getLogger(__name__)

WELCOME_SUMMARY = "Welcome to the network"


async def run_warm_start_enrichment(
    graph: IdentityGraph,
    record: ExternalIdentityRecord,
    hints: ProfileHints,
    welcome_identity_id: str | None,
    timeout_ms: int = 5000,
) -> None:
    tags = infer_interest_tags(hints)
    try:
        await with_timeout(
            graph.assign_tags(record.id, tags), timeout_ms,
            operation_name="warm_start_tags",
        )
    except Exception as e:
        logger.warning(
            f"Warm start: tag assignment failed for {record.id}: {e}",
            extra={"operation": "warm_start_tags"},
        )

    if not welcome_identity_id or welcome_identity_id == record.id:
        return
    try:
        await with_timeout(
            graph.seed_relationship(welcome_identity_id, record.id, WELCOME_SUMMARY),
            timeout_ms,
            operation_name="warm_start_relationship",
        )
    except Exception as e:
        logger.warning(
            f"Warm start: welcome relationship failed for {record.id}: {e}",
            extra={"operation": "warm_start_relationship"},
        )
