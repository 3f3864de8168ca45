"""Notifier — fans one event out to every listener in the event's room.

Learn: Write handlers call dispatch() right after the Store commit and
return their HTTP response without waiting. dispatch() spawns a tracked
task that runs publish(); the task set is what lets shutdown cancel
in-flight deliveries instead of leaving orphaned coroutines behind.

Delivery is best effort: one attempt per listener snapshotted at publish
time, no retries, no buffering. A failed push only cancels that listener;
the subscribe handler that owns it does the unregistering.
"""

import asyncio
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog

from ama.events.types import Event, encode
from ama.realtime.listener import Channel, Listener
from ama.realtime.registry import SubscriptionRegistry

logger = structlog.get_logger()


class Notifier:
    """Owns the registry and every delivery task. One per application."""

    def __init__(
        self,
        registry: SubscriptionRegistry | None = None,
        send_timeout: float = 5.0,
        close_timeout: float = 2.0,
    ):
        self.registry = registry or SubscriptionRegistry()
        self.send_timeout = send_timeout
        self.close_timeout = close_timeout
        self._tasks: set[asyncio.Task] = set()

    # ─── Fan-out ────────────────────────────────────────

    async def publish(self, event: Event) -> int:
        """Attempt delivery to the room's current listeners.

        Returns how many deliveries succeeded. Never raises for a bad
        listener; rooms without listeners are a normal no-op.
        """
        listeners = self.registry.listeners_for(event.room_id)
        if not listeners:
            return 0

        payload = encode(event)
        results = await asyncio.gather(
            *(listener.send(payload) for listener in listeners)
        )
        delivered = sum(results)
        logger.debug(
            "realtime.published",
            kind=event.kind,
            room_id=str(event.room_id),
            listeners=len(listeners),
            delivered=delivered,
        )
        return delivered

    def dispatch(self, event: Event) -> asyncio.Task:
        """Fire-and-forget publish. The caller never sees the outcome."""
        task = asyncio.get_running_loop().create_task(self.publish(event))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("realtime.publish_crashed", error=repr(task.exception()))

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self, timeout: float | None = None) -> bool:
        """Wait for dispatched publishes to finish.

        Returns False if `timeout` ran out first; the stragglers keep running.
        Shutdown drains briefly so writes that just committed still reach
        their listeners before aclose() cancels what's left.
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        while self._tasks:
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                return False
            _, pending = await asyncio.wait(list(self._tasks), timeout=remaining)
            if pending:
                return False
        return True

    # ─── Subscriptions ──────────────────────────────────

    @asynccontextmanager
    async def subscribe(
        self, room_id: uuid.UUID, channel: Channel
    ) -> AsyncIterator[Listener]:
        """Register a listener for the lifetime of the `async with` block.

        The listener is registered and ACTIVE before the block body runs,
        so it can receive events as soon as the caller starts waiting.
        Any exit, including an exception or task cancellation, unregisters and
        closes it exactly once.
        """
        listener = Listener(
            channel,
            room_id,
            send_timeout=self.send_timeout,
            close_timeout=self.close_timeout,
        )
        self.registry.register(room_id, listener)
        listener.activate()
        logger.info(
            "realtime.listener_registered",
            listener_id=listener.id,
            room_id=str(room_id),
        )
        try:
            yield listener
        finally:
            listener.cancel()
            self.registry.unregister(room_id, listener)
            await listener.close()
            logger.info(
                "realtime.listener_closed",
                listener_id=listener.id,
                room_id=str(room_id),
            )

    # ─── Shutdown ───────────────────────────────────────

    async def aclose(self) -> None:
        """Cancel in-flight publishes and wake every suspended subscriber."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        listeners = self.registry.all_listeners()
        for listener in listeners:
            listener.cancel()
        logger.info(
            "realtime.notifier_closed",
            cancelled_publishes=len(tasks),
            cancelled_listeners=len(listeners),
        )
