"""Store failure handling — database errors become StoreError.

Learn: These run without Postgres. The RoomService gets an AsyncMock
session whose queries raise OperationalError, the way asyncpg surfaces a
dropped connection.
"""

import uuid
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from ama.services.room_service import NotFoundError, RoomService, StoreError


def _dead_db() -> AsyncMock:
    session = AsyncMock(spec=AsyncSession)
    error = OperationalError("SELECT 1", {}, ConnectionRefusedError("connection refused"))
    session.get.side_effect = error
    session.execute.side_effect = error
    session.commit.side_effect = error
    return session


@pytest.mark.asyncio
async def test_get_room_wraps_database_error():
    session = _dead_db()
    svc = RoomService(session)

    with pytest.raises(StoreError) as exc_info:
        await svc.get_room(uuid.uuid4())

    assert isinstance(exc_info.value.__cause__, OperationalError)
    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_wraps_database_error():
    session = _dead_db()
    svc = RoomService(session)

    with pytest.raises(StoreError) as exc_info:
        await svc.react_to_message(uuid.uuid4(), uuid.uuid4())

    assert isinstance(exc_info.value.__cause__, OperationalError)
    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_failed_commit_rolls_back():
    session = AsyncMock(spec=AsyncSession)
    session.add = lambda obj: None
    session.commit.side_effect = OperationalError("INSERT", {}, OSError("broken pipe"))
    svc = RoomService(session)

    with pytest.raises(StoreError):
        await svc.insert_room("AMA")

    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_nested_store_ops_roll_back_once():
    """insert_message checks the room first; the failure is wrapped once."""
    session = _dead_db()
    svc = RoomService(session)

    with pytest.raises(StoreError) as exc_info:
        await svc.insert_message(uuid.uuid4(), "hello")

    assert isinstance(exc_info.value.__cause__, OperationalError)
    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_not_found_is_not_a_store_error():
    session = AsyncMock(spec=AsyncSession)
    session.get.return_value = None
    svc = RoomService(session)

    with pytest.raises(NotFoundError):
        await svc.get_room(uuid.uuid4())

    session.rollback.assert_not_awaited()
