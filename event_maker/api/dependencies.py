"""Service Wiring - builds the service graph once per process and exposes it to routes.

Invariants:
    - One Services instance per application, stored on app.state by the lifespan
    - Routes never construct adapters themselves; tests swap app.state.services
"""

from dataclasses import dataclass

import httpx
from fastapi import Request

from event_maker.config import Settings
from event_maker.core.repository_protocols import (
    EventRepository, GenerationCapability, IdentityGraph, RateLimitStore,
)
from event_maker.infrastructure.anthropic_client import AnthropicEventGenerator
from event_maker.infrastructure.background_tasks import BackgroundTaskRegistry
from event_maker.infrastructure.database import DatabaseSessionManager
from event_maker.infrastructure.event_repository import SqlEventRepository
from event_maker.infrastructure.identity_graph_client import HttpIdentityGraph
from event_maker.infrastructure.rate_limit_store import SqlRateLimitStore
from event_maker.services.bulk_sync import BulkSyncOrchestrator
from event_maker.services.event_generation import EventGenerationService
from event_maker.services.identity_resolver import IdentityResolver
from event_maker.services.protocol_sync import ProtocolSyncPipeline
from event_maker.services.rate_limiter import RateLimiterGate


@dataclass
class Services:
    """Everything the routes need."""
    resolver: IdentityResolver
    bulk_sync: BulkSyncOrchestrator
    pipeline: ProtocolSyncPipeline
    generation: EventGenerationService
    repository: EventRepository
    tasks: BackgroundTaskRegistry
    db: DatabaseSessionManager | None = None


def build_services(
    settings: Settings,
    *,
    generator: GenerationCapability,
    graph: IdentityGraph,
    quota_store: RateLimitStore,
    repository: EventRepository,
    tasks: BackgroundTaskRegistry,
    db: DatabaseSessionManager | None = None,
) -> Services:
    resolver = IdentityResolver(
        graph,
        settings.identity_graph_owner_id,
        tasks,
        search_timeout_ms=settings.identity_search_timeout_ms,
        create_timeout_ms=settings.identity_create_timeout_ms,
        welcome_identity_id=settings.welcome_identity_id,
    )
    bulk_sync = BulkSyncOrchestrator(resolver)
    pipeline = ProtocolSyncPipeline(
        bulk_sync, graph, tag_timeout_ms=settings.identity_create_timeout_ms,
    )
    gate = RateLimiterGate(
        quota_store,
        quota=settings.generation_quota,
        window_seconds=settings.generation_quota_window_seconds,
    )
    generation = EventGenerationService(
        generator, gate, pipeline, repository,
        policy=settings.retry_policy(),
        attempt_timeout_ms=settings.generation_attempt_timeout_ms,
    )
    return Services(
        resolver=resolver,
        bulk_sync=bulk_sync,
        pipeline=pipeline,
        generation=generation,
        repository=repository,
        tasks=tasks,
        db=db,
    )


def build_production_services(
    settings: Settings,
    db: DatabaseSessionManager,
    http_client: httpx.AsyncClient,
    tasks: BackgroundTaskRegistry,
) -> Services:
    """Real adapters: Anthropic, HTTP identity graph, SQL stores."""
    return build_services(
        settings,
        generator=AnthropicEventGenerator(
            api_key=settings.anthropic_api_key,
            model=settings.generation_model,
            max_tokens=settings.generation_max_tokens,
            timeout_seconds=settings.anthropic_timeout_seconds,
        ),
        graph=HttpIdentityGraph(http_client, settings.identity_graph_owner_id),
        quota_store=SqlRateLimitStore(db),
        repository=SqlEventRepository(db),
        tasks=tasks,
        db=db,
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency."""
    return request.app.state.services
