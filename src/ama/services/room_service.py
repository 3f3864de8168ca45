"""Room service — the Store for rooms and messages.

Learn: Service layer separates persistence from HTTP routing. Routes call
the service, the service talks to the database and commits. Two error
types cross this boundary:

- NotFoundError: the room/message doesn't exist (→ 404)
- StoreError: the database failed (→ 500); the session is rolled back first

Message lookups are always scoped by room, so a message id from another
room is simply "not found", so events can never be routed to the wrong room.
"""

import functools
import uuid

import structlog
from sqlalchemy import case, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ama.db.models import Message, Room

logger = structlog.get_logger()


class NotFoundError(Exception):
    """Raised when a room or message doesn't exist."""
    pass


class StoreError(Exception):
    """Raised when the database fails. Not retried here."""
    pass


def _store_op(fn):
    """Roll back and wrap SQLAlchemy failures as StoreError."""

    @functools.wraps(fn)
    async def wrapper(self, *args, **kwargs):
        try:
            return await fn(self, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.error("store.error", op=fn.__name__, error=str(e))
            await self.db.rollback()
            raise StoreError(f"{fn.__name__} failed") from e

    return wrapper


class RoomService:
    """CRUD for rooms and messages."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def close(self) -> None:
        """Give the session's connection back to the pool."""
        await self.db.close()

    # ─── Rooms ──────────────────────────────────────────

    @_store_op
    async def get_room(self, room_id: uuid.UUID) -> Room:
        room = await self.db.get(Room, room_id)
        if room is None:
            raise NotFoundError("room not found")
        return room

    @_store_op
    async def insert_room(self, theme: str) -> uuid.UUID:
        room = Room(theme=theme)
        self.db.add(room)
        await self.db.commit()
        logger.info("room.created", room_id=str(room.id))
        return room.id

    @_store_op
    async def get_rooms(self) -> list[Room]:
        result = await self.db.execute(select(Room).order_by(Room.created_at))
        return list(result.scalars().all())

    # ─── Messages ───────────────────────────────────────

    @_store_op
    async def insert_message(self, room_id: uuid.UUID, text: str) -> uuid.UUID:
        await self.get_room(room_id)
        message = Message(room_id=room_id, message=text)
        self.db.add(message)
        await self.db.commit()
        logger.info("message.created", room_id=str(room_id), message_id=str(message.id))
        return message.id

    @_store_op
    async def get_room_messages(self, room_id: uuid.UUID) -> list[Message]:
        await self.get_room(room_id)
        result = await self.db.execute(
            select(Message)
            .where(Message.room_id == room_id)
            .order_by(Message.created_at)
        )
        return list(result.scalars().all())

    @_store_op
    async def get_message(self, room_id: uuid.UUID, message_id: uuid.UUID) -> Message:
        result = await self.db.execute(
            select(Message).where(Message.id == message_id, Message.room_id == room_id)
        )
        message = result.scalars().first()
        if message is None:
            raise NotFoundError("message not found")
        return message

    @_store_op
    async def react_to_message(self, room_id: uuid.UUID, message_id: uuid.UUID) -> int:
        """Increment the reaction count. Returns the new count."""
        return await self._update_message(
            room_id, message_id, reaction_count=Message.reaction_count + 1
        )

    @_store_op
    async def remove_reaction(self, room_id: uuid.UUID, message_id: uuid.UUID) -> int:
        """Decrement the reaction count, never below zero. Returns the new count."""
        return await self._update_message(
            room_id,
            message_id,
            reaction_count=case(
                (Message.reaction_count > 0, Message.reaction_count - 1),
                else_=0,
            ),
        )

    @_store_op
    async def mark_answered(self, room_id: uuid.UUID, message_id: uuid.UUID) -> None:
        await self._update_message(room_id, message_id, answered=True)

    async def _update_message(
        self, room_id: uuid.UUID, message_id: uuid.UUID, **values
    ) -> int:
        result = await self.db.execute(
            update(Message)
            .where(Message.id == message_id, Message.room_id == room_id)
            .values(**values)
            .returning(Message.reaction_count)
        )
        count = result.scalar_one_or_none()
        if count is None:
            await self.db.rollback()
            raise NotFoundError("message not found")
        await self.db.commit()
        return count
