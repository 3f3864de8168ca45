"""Listener — one live connection subscribed to one room.

Learn: A listener pairs a duplex channel (the accepted WebSocket) with a
single cancellation signal. Whoever notices the connection is dead (the
client reader, a failed push, or shutdown) calls cancel(). Exactly one
waiter (the subscribe handler) observes it and runs cleanup.

    PENDING → ACTIVE → CLOSING → CLOSED

A listener is only written to while ACTIVE.
"""

import asyncio
import enum
import uuid
from typing import Protocol

import structlog

logger = structlog.get_logger()


class Channel(Protocol):
    """What a listener needs from the transport."""

    async def send_text(self, data: str) -> None: ...

    async def close(self) -> None: ...


class ListenerState(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


class Listener:
    """A registered connection plus its cancellation signal.

    Listeners compare by identity: subscribing the same socket twice
    produces two independent listeners.
    """

    def __init__(
        self,
        channel: Channel,
        room_id: uuid.UUID,
        send_timeout: float = 5.0,
        close_timeout: float = 2.0,
    ):
        self.id = uuid.uuid4().hex[:12]
        self.channel = channel
        self.room_id = room_id
        self.send_timeout = send_timeout
        self.close_timeout = close_timeout
        self.state = ListenerState.PENDING
        self._cancelled = asyncio.Event()

    def __repr__(self) -> str:
        return f"<Listener {self.id} room={self.room_id} state={self.state.value}>"

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def activate(self) -> None:
        if self.state is not ListenerState.PENDING:
            raise RuntimeError(f"cannot activate listener in state {self.state.value}")
        self.state = ListenerState.ACTIVE

    def cancel(self) -> None:
        """Fire the cancellation signal. Safe to call any number of times."""
        if self.state in (ListenerState.PENDING, ListenerState.ACTIVE):
            self.state = ListenerState.CLOSING
        self._cancelled.set()

    async def wait(self) -> None:
        """Suspend until cancel() is called."""
        await self._cancelled.wait()

    async def send(self, payload: str) -> bool:
        """One bounded delivery attempt. A failure cancels the listener."""
        if self.state is not ListenerState.ACTIVE:
            return False
        try:
            await asyncio.wait_for(self.channel.send_text(payload), self.send_timeout)
        except Exception as e:
            logger.warning(
                "realtime.delivery_failed",
                listener_id=self.id,
                room_id=str(self.room_id),
                error=repr(e),
            )
            self.cancel()
            return False
        return True

    async def close(self) -> None:
        """Release the channel. Runs once; later calls return immediately."""
        if self.state is ListenerState.CLOSED:
            return
        self.state = ListenerState.CLOSED
        self._cancelled.set()
        try:
            await asyncio.wait_for(self.channel.close(), self.close_timeout)
        except Exception as e:
            logger.debug("realtime.close_failed", listener_id=self.id, error=repr(e))
