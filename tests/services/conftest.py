"""Service test fixtures — async DB, FastAPI test client and scriptable channels.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - get_dispatcher overridden with a dispatcher over FakeChannels, so no
      test ever reaches a messaging gateway
    - db_manager patched so the readiness probe sees the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - httpx ASGITransport does not run the lifespan; the dispatcher
      dependency override replaces what the lifespan would build
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from crewdesk.api.dependencies import get_dispatcher
from crewdesk.db.base import Base
from crewdesk.infrastructure.database import get_db, DatabaseSessionManager
from crewdesk.infrastructure.repositories import SqlCategoryRepository
import crewdesk.infrastructure.database as db_module
import crewdesk.models  # noqa: F401
from crewdesk.main import app
from crewdesk.services.notification_dispatcher import NotificationDispatcher
from tests.fakes import FakeChannel


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def channels():
    """WhatsApp first, SMS fallback; both succeed unless a test rescripts them."""
    return [FakeChannel("whatsapp", 10), FakeChannel("sms", 20)]


@pytest.fixture
def dispatcher(channels):
    return NotificationDispatcher(channels, attempt_timeout=0.2)


@pytest.fixture
async def client(test_engine, test_session_factory, dispatcher):
    """FastAPI test client with DB and dispatcher dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    await dispatcher.drain()
    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def seed_category(test_db):
    """Active top-level category inserted directly into the test DB."""
    return await SqlCategoryRepository(test_db).insert({"name": "Electrician"})
