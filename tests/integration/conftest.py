"""Integration test fixtures.

Provides fixtures for integration testing with a real database and the
FastAPI app. Uses an SQLite in-memory database and the in-process session
store, so tests need neither PostgreSQL nor Redis.
"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from clockwork_auth.application.services.side_effects import SideEffectDispatcher
from clockwork_auth.infrastructure.persistence.database import Base
from clockwork_auth.infrastructure.persistence.models import principal_model  # noqa: F401
from clockwork_auth.infrastructure.repositories.session_store_memory import InMemorySessionStore
from clockwork_auth.main import app
from clockwork_auth.presentation.dependencies import (
    get_notifier,
    get_session_factory,
    get_session_store,
    get_side_effect_dispatcher,
)
from tests.fakes import FakeNotificationDispatcher

# Test database URL (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine]:
    """Create a test database engine; one shared in-memory connection."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine: AsyncEngine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest_asyncio.fixture
async def notifier() -> FakeNotificationDispatcher:
    return FakeNotificationDispatcher()


@pytest_asyncio.fixture
async def dispatcher() -> AsyncGenerator[SideEffectDispatcher]:
    """Call `await dispatcher.drain()` before asserting on notifications."""
    side_effects = SideEffectDispatcher(backoff_seconds=0)
    yield side_effects
    await side_effects.drain(timeout=5)


@pytest_asyncio.fixture
async def client(test_session_factory, session_store, notifier, dispatcher) -> AsyncGenerator[AsyncClient]:
    """
    HTTP client bound to the real application.

    Database, session store, notifier and side-effect dispatcher are
    swapped for per-test instances; everything else is production wiring.
    """
    app.dependency_overrides[get_session_factory] = lambda: test_session_factory
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_side_effect_dispatcher] = lambda: dispatcher

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    # Clean up overrides
    app.dependency_overrides.clear()
