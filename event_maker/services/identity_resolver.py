"""Identity Resolver - search-or-create-or-fallback for one external identity.

Invariants:
    - ensure_identity() never raises (task cancellation excepted): it always returns a
      record, real or fallback
    - Search is bounded by search_timeout_ms, create by create_timeout_ms; worst case
      wall time is their sum
    - Any search failure is treated as "not found"
    - Warm-start enrichment is spawned only after a successful create, never awaited
    - Fallback records are returned but never cached, so a later call can still
      resolve a real identity once the graph recovers

Design Decisions:
    - Availability over consistency: the product flow must not block on graph outages
"""

import logging

from event_maker.core.identity_records import (
    ExternalIdentityRecord,
    ProfileHints,
    build_fallback_identity,
    build_person_fields,
    cache_keys,
    record_from_person,
)
from event_maker.core.log_fields import preview
from event_maker.core.repository_protocols import IdentityCache, IdentityGraph
from event_maker.infrastructure.background_tasks import BackgroundTaskRegistry
from event_maker.infrastructure.timeout_guard import with_timeout
from event_maker.services.warm_start import run_warm_start_enrichment

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Resolves profile hints to identity-graph records with graceful degradation."""

    def __init__(
        self,
        graph: IdentityGraph,
        owner_id: str,
        tasks: BackgroundTaskRegistry,
        *,
        search_timeout_ms: int = 3000,
        create_timeout_ms: int = 5000,
        welcome_identity_id: str | None = None,
    ):
        self.graph = graph
        self.owner_id = owner_id
        self.tasks = tasks
        self.search_timeout_ms = search_timeout_ms
        self.create_timeout_ms = create_timeout_ms
        self.welcome_identity_id = welcome_identity_id

    async def ensure_identity(
        self, hints: ProfileHints, cache: IdentityCache | None = None,
    ) -> ExternalIdentityRecord:
        try:
            return await self._resolve(hints, cache)
        except Exception as e:
            logger.error(
                f"Identity resolution crashed, using fallback: {e}",
                exc_info=True,
                extra={"operation": "ensure_identity", "input_preview": _label(hints)},
            )
            return build_fallback_identity(hints.external_caller_id)

    async def _resolve(
        self, hints: ProfileHints, cache: IdentityCache | None,
    ) -> ExternalIdentityRecord:
        keys = cache_keys(hints)
        if cache is not None:
            for key in keys:
                cached = cache.get(key)
                if cached is not None:
                    return cached

        record = await self._search(hints) if hints.email else None
        if record is None:
            record = await self._create(hints)
        if record is None:
            logger.warning(
                "Identity graph unavailable, using fallback identity",
                extra={"operation": "ensure_identity", "input_preview": _label(hints)},
            )
            return build_fallback_identity(hints.external_caller_id)

        if cache is not None:
            for key in keys:
                cache.put(key, record)
        return record

    async def _search(self, hints: ProfileHints) -> ExternalIdentityRecord | None:
        try:
            people = await with_timeout(
                self.graph.search(hints.email, self.owner_id),
                self.search_timeout_ms,
                operation_name="identity_search",
            )
            if not people:
                return None
            record = record_from_person(people[0], hints.external_caller_id)
        except Exception as e:
            logger.warning(
                f"Identity search failed, treating as not found: {e}",
                extra={"operation": "identity_search", "input_preview": _label(hints)},
            )
            return None
        logger.info(
            "Found existing identity",
            extra={"operation": "identity_search", "input_preview": _label(hints)},
        )
        return record

    async def _create(self, hints: ProfileHints) -> ExternalIdentityRecord | None:
        fields = build_person_fields(hints, self.owner_id)
        try:
            person = await with_timeout(
                self.graph.create(fields),
                self.create_timeout_ms,
                operation_name="identity_create",
            )
            record = record_from_person(person, hints.external_caller_id)
        except Exception as e:
            logger.warning(
                f"Identity create failed: {e}",
                extra={"operation": "identity_create", "input_preview": _label(hints)},
            )
            return None

        self.tasks.spawn(
            run_warm_start_enrichment(
                self.graph, record, hints, self.welcome_identity_id,
                timeout_ms=self.create_timeout_ms,
            ),
            name=f"warm_start:{record.id}",
        )
        return record


def _label(hints: ProfileHints) -> str:
    return preview(hints.display_name or hints.email or "anonymous", limit=40)
