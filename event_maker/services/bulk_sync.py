"""Bulk Synchronization Orchestrator - concurrent identity resolution over a batch.

Invariants:
    - ingest_batch() never raises; partial success is the normal outcome
    - created_count + failed_count == len(targets) and len(records) == len(targets)
    - records[i] belongs to targets[i]; completion order is not assumed anywhere
    - Targets sharing an identity key are resolved once and share the resulting record
    - An empty batch returns 0/0/[] without touching the graph
"""

import asyncio
import logging
from dataclasses import replace

from event_maker.core.identity_records import (
    ExternalIdentityRecord,
    SyncBatchResult,
    SyncTarget,
    build_fallback_identity,
    cache_keys,
    summarize_batch,
)
from event_maker.core.repository_protocols import IdentityCache
from event_maker.services.identity_resolver import IdentityResolver

logger = logging.getLogger(__name__)


class BulkSyncOrchestrator:
    """Fan-out/fan-in of IdentityResolver.ensure_identity over many targets."""

    def __init__(self, resolver: IdentityResolver):
        self.resolver = resolver

    async def ingest_batch(
        self, targets: list[SyncTarget], cache: IdentityCache | None = None,
    ) -> SyncBatchResult:
        if not targets:
            return SyncBatchResult(created_count=0, failed_count=0, records=[])

        groups = _group_by_identity(targets)
        outcomes = await asyncio.gather(
            *(
                self.resolver.ensure_identity(targets[indexes[0]].to_hints(), cache)
                for indexes in groups
            ),
            return_exceptions=True,
        )
        records: list[ExternalIdentityRecord | None] = [None] * len(targets)
        for indexes, outcome in zip(groups, outcomes):
            record = _as_record(outcome, targets[indexes[0]])
            for i in indexes:
                records[i] = _for_target(record, targets[i])

        result = summarize_batch(records)
        logger.info(
            f"Ingested batch: {result.created_count} created, "
            f"{result.failed_count} failed of {len(targets)} "
            f"({len(groups)} unique)",
            extra={"operation": "ingest_batch"},
        )
        return result


def _group_by_identity(targets: list[SyncTarget]) -> list[list[int]]:
    """Target indexes grouped by their most specific cache key, in first-seen order."""
    keyed: dict[str, list[int]] = {}
    unkeyed: list[list[int]] = []
    for i, target in enumerate(targets):
        keys = cache_keys(target.to_hints())
        if keys:
            keyed.setdefault(keys[0], []).append(i)
        else:
            unkeyed.append([i])
    return sorted([*keyed.values(), *unkeyed], key=lambda indexes: indexes[0])


def _for_target(
    record: ExternalIdentityRecord, target: SyncTarget,
) -> ExternalIdentityRecord:
    if target.source_id is None or record.external_caller_id == target.source_id:
        return record
    return replace(record, external_caller_id=target.source_id)


def _as_record(outcome, target: SyncTarget) -> ExternalIdentityRecord:
    if isinstance(outcome, ExternalIdentityRecord):
        return outcome
    if isinstance(outcome, asyncio.CancelledError):
        raise outcome
    logger.error(
        f"Unexpected failure resolving {target.name!r}: {outcome}",
        extra={"operation": "ingest_batch"},
    )
    return build_fallback_identity(target.source_id)
