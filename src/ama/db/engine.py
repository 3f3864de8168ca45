"""Database engine and per-request sessions.

Learn: Two kinds of callers hold a session, for very different lengths
of time:

- HTTP routes use one session for the whole request (a few queries, one
  commit) and hand it back when the response is sent.
- The WebSocket route only needs the Store for its room check. It calls
  RoomService.close() right after, because a subscription can stay open
  for hours and must not pin a pooled connection while it waits.

So the pool is sized for concurrent requests, not concurrent listeners.
The engine is lazy: nothing connects until the first query.
"""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ama.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    # Drop connections Postgres closed while idle instead of failing a write
    pool_pre_ping=True,
)

# Routes return ids and counts after commit; keep loaded attributes valid
async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency behind get_room_service.

    Closing twice is harmless, so the WebSocket route's early close and
    this cleanup can both run.
    """
    async with async_session_factory() as session:
        yield session
