"""Service test fixtures - protocol fakes, SQLite database and FastAPI test client.

Invariants:
    - Every test gets fresh fakes and a fresh file-backed SQLite database (tmp_path)
    - Backoff waits are recorded, never slept (backoff_delays fixture)
    - Background tasks spawned during a test are drained at teardown
    - Route tests swap app.state.services; the lifespan never runs under ASGITransport

Design Decisions:
    - File-backed SQLite over :memory:: every pooled connection sees the same tables
    - Fakes over mocks: the Protocols are small, a fake documents the contract
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from event_maker.api.dependencies import build_services
from event_maker.config import Settings
from event_maker.infrastructure.background_tasks import BackgroundTaskRegistry
from event_maker.infrastructure.database import DatabaseSessionManager
from event_maker.infrastructure.event_repository import SqlEventRepository
from event_maker.main import app
from event_maker.services.bulk_sync import BulkSyncOrchestrator
from event_maker.services.identity_resolver import IdentityResolver
from event_maker.services.protocol_sync import ProtocolSyncPipeline

from tests.services.fakes import (
    FakeGenerator,
    FakeIdentityGraph,
    FakeRateLimitStore,
)

OWNER_ID = "owner-test"
WELCOME_ID = "system-welcome"


@pytest.fixture
def graph():
    return FakeIdentityGraph()


@pytest.fixture
async def tasks():
    registry = BackgroundTaskRegistry()
    yield registry
    await registry.drain(1)


@pytest.fixture
def backoff_delays(monkeypatch):
    """Record backoff delays (ms) instead of sleeping."""
    delays = []

    async def _record(delay_ms):
        delays.append(delay_ms)

    monkeypatch.setattr(
        "event_maker.infrastructure.resilient_call._backoff_sleep", _record,
    )
    return delays


@pytest.fixture
def resolver(graph, tasks):
    return IdentityResolver(
        graph, OWNER_ID, tasks,
        search_timeout_ms=200,
        create_timeout_ms=200,
        welcome_identity_id=WELCOME_ID,
    )


@pytest.fixture
def orchestrator(resolver):
    return BulkSyncOrchestrator(resolver)


@pytest.fixture
def pipeline(orchestrator, graph):
    return ProtocolSyncPipeline(orchestrator, graph, tag_timeout_ms=200)


@pytest.fixture
async def db(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'events.db'}")
    manager = DatabaseSessionManager.from_engine(engine)
    await manager.create_all()
    yield manager
    await manager.dispose()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def quota_store():
    return FakeRateLimitStore()


@pytest.fixture
async def client(graph, tasks, db, generator, quota_store, backoff_delays):
    """FastAPI test client wired to fakes (generator, graph, quota) and SQLite."""
    settings = Settings(
        generation_quota=2,
        identity_graph_owner_id=OWNER_ID,
        identity_search_timeout_ms=200,
        identity_create_timeout_ms=200,
        welcome_identity_id=WELCOME_ID,
    )
    app.state.services = build_services(
        settings,
        generator=generator,
        graph=graph,
        quota_store=quota_store,
        repository=SqlEventRepository(db),
        tasks=tasks,
        db=db,
    )
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    del app.state.services
