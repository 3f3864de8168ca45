"""Test fixtures.

Learn: Two layers of isolation:

1. API / WebSocket tests get a fresh app from create_app() per test (so a
   fresh Notifier and registry) with the Store dependency overridden by an
   in-memory fake. No database needed.
2. Store tests get a real Postgres session that rolls back after each test
   (join_transaction_mode="create_savepoint" turns every commit() into a
   SAVEPOINT). They're skipped when no database is reachable.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from ama.api.dependencies import get_room_service
from ama.config import settings
from ama.db.models import Base
from ama.main import create_app
from fakes import InMemoryRoomService

TEST_DB_URL = settings.database_url


@pytest.fixture()
def store():
    return InMemoryRoomService()


@pytest.fixture()
def app(store):
    """Fresh app whose Store is the in-memory fake."""
    application = create_app()
    application.dependency_overrides[get_room_service] = lambda: store
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def notifier(app):
    return app.state.notifier


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client bound to the app in-process (no lifespan, no network)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await app.state.notifier.aclose()


@pytest_asyncio.fixture()
async def db_session():
    """Per-test Postgres session with automatic rollback via savepoints.

    Tables are created inside the outer transaction, so they vanish
    with the rollback too.
    """
    engine = create_async_engine(TEST_DB_URL, echo=False, connect_args={"timeout": 3})
    try:
        conn = await engine.connect()
    except (OSError, SQLAlchemyError) as e:
        await engine.dispose()
        pytest.skip(f"Postgres not reachable at {TEST_DB_URL}: {e}")

    trans = await conn.begin()
    await conn.run_sync(Base.metadata.create_all)
    session = AsyncSession(
        bind=conn,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        await session.close()
        await trans.rollback()
        await conn.close()
        await engine.dispose()
