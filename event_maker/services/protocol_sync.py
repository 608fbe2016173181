"""Protocol Sync Pipeline - best-effort sync of a generated config into the identity graph.

Invariants:
    - Phases run in order: attendees, speakers, sessions
    - Each phase is fault-isolated: a crash is logged, recorded in the report, and the
      next phase still runs
    - sync_generated_config() never raises (task cancellation excepted)
    - Resolved handle/did are merged back into the config in place; a fallback record
      never erases an existing handle/did
    - A context tag that already exists counts as synced
"""

import asyncio
import logging
from dataclasses import dataclass, field

from event_maker.core.domain_types import RoleHint, SyncPhase
from event_maker.core.errors import TagConflictError
from event_maker.core.identity_records import (
    ExternalIdentityRecord, SyncBatchResult, SyncTarget,
)
from event_maker.core.repository_protocols import IdentityCache, IdentityGraph
from event_maker.infrastructure.timeout_guard import with_timeout
from event_maker.schemas.event_config import EventConfig
from event_maker.services.bulk_sync import BulkSyncOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    """What one pipeline run achieved."""
    attendees: SyncBatchResult | None = None
    speakers: SyncBatchResult | None = None
    sessions_synced: int = 0
    sessions_failed: int = 0
    failed_phases: list[SyncPhase] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "attendees": self.attendees.to_dict() if self.attendees else None,
            "speakers": self.speakers.to_dict() if self.speakers else None,
            "sessions_synced": self.sessions_synced,
            "sessions_failed": self.sessions_failed,
            "failed_phases": [p.value for p in self.failed_phases],
        }


class ProtocolSyncPipeline:
    """Sequences attendee, speaker and session sync for one event."""

    def __init__(
        self,
        orchestrator: BulkSyncOrchestrator,
        graph: IdentityGraph,
        tag_timeout_ms: int = 5000,
    ):
        self.orchestrator = orchestrator
        self.graph = graph
        self.tag_timeout_ms = tag_timeout_ms

    async def sync_generated_config(
        self,
        event_id: str,
        config: EventConfig,
        cache: IdentityCache | None = None,
    ) -> SyncReport:
        report = SyncReport()
        phases = (
            (SyncPhase.ATTENDEES, self._sync_attendees),
            (SyncPhase.SPEAKERS, self._sync_speakers),
            (SyncPhase.SESSIONS, self._sync_sessions),
        )
        for phase, run in phases:
            try:
                await run(event_id, config, report, cache)
            except Exception as e:
                report.failed_phases.append(phase)
                logger.error(
                    f"Protocol sync phase {phase.value} failed: {e}",
                    exc_info=True,
                    extra={"phase": phase.value, "event_id": event_id},
                )
        return report

    async def _sync_attendees(
        self, event_id: str, config: EventConfig, report: SyncReport,
        cache: IdentityCache | None,
    ) -> None:
        attendees = config.content.sample_attendees
        if not attendees:
            return
        targets = [
            SyncTarget(
                name=a.legal_name or a.preferred_name or "Unknown",
                email=a.emails[0] if a.emails else None,
                tags=tuple(a.tags),
                role_hint=RoleHint.ATTENDEE,
                source_id=a.person_id,
            )
            for a in attendees
        ]
        result = await self.orchestrator.ingest_batch(targets, cache)
        for attendee, record in zip(attendees, result.records):
            attendee.handle, attendee.did = _merged(record, attendee.handle, attendee.did)
        report.attendees = result
        _log_phase(SyncPhase.ATTENDEES, event_id, result)

    async def _sync_speakers(
        self, event_id: str, config: EventConfig, report: SyncReport,
        cache: IdentityCache | None,
    ) -> None:
        speakers = config.content.speakers
        if not speakers:
            return
        targets = [
            SyncTarget(
                name=s.name,
                tags=tuple(t for t in ("Speaker", s.role) if t),
                role_hint=RoleHint.SPEAKER,
                source_id=s.handle,
            )
            for s in speakers
        ]
        result = await self.orchestrator.ingest_batch(targets, cache)
        for speaker, record in zip(speakers, result.records):
            speaker.handle, speaker.did = _merged(record, speaker.handle, speaker.did)
        report.speakers = result
        _log_phase(SyncPhase.SPEAKERS, event_id, result)

    async def _sync_sessions(
        self, event_id: str, config: EventConfig, report: SyncReport,
        cache: IdentityCache | None,
    ) -> None:
        sessions = config.content.schedule
        if not sessions:
            return
        labels = [f"{event_id}:{s.title}" for s in sessions]
        outcomes = await asyncio.gather(
            *(self._create_tag(label) for label in labels),
            return_exceptions=True,
        )
        for label, outcome in zip(labels, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                report.sessions_failed += 1
                logger.warning(
                    f"Context tag sync failed for {label!r}: {outcome}",
                    extra={"phase": SyncPhase.SESSIONS.value, "event_id": event_id},
                )
            else:
                report.sessions_synced += 1

    async def _create_tag(self, label: str) -> None:
        try:
            await with_timeout(
                self.graph.create_context_tag(label), self.tag_timeout_ms,
                operation_name="create_context_tag",
            )
        except TagConflictError:
            logger.debug(f"Context tag already exists: {label!r}")


def _merged(
    record: ExternalIdentityRecord, handle: str | None, did: str | None,
) -> tuple[str | None, str | None]:
    return record.handle or handle, record.distributed_id or did


def _log_phase(phase: SyncPhase, event_id: str, result: SyncBatchResult) -> None:
    logger.info(
        f"Protocol sync {phase.value}: {result.created_count} synced, "
        f"{result.failed_count} degraded",
        extra={"phase": phase.value, "event_id": event_id},
    )
