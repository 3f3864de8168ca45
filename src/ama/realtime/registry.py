"""Subscription registry — room id → set of live listeners.

Learn: This is the only shared mutable state in the realtime core. One
lock guards the whole mapping and is held just long enough to look up or
mutate a set. Pushes never happen under the lock: the notifier asks for a
snapshot and writes to sockets afterwards, so one slow client can't stall
subscribes or publishes for any other room.

A threading.Lock (not asyncio.Lock) because every critical section is
synchronous: nothing inside it awaits.
"""

import threading
import uuid

from ama.realtime.listener import Listener


class SubscriptionRegistry:
    def __init__(self):
        self._lock = threading.Lock()
        self._rooms: dict[uuid.UUID, set[Listener]] = {}

    def register(self, room_id: uuid.UUID, listener: Listener) -> None:
        """Add a listener to a room. Callers must not register the same listener twice."""
        with self._lock:
            self._rooms.setdefault(room_id, set()).add(listener)

    def unregister(self, room_id: uuid.UUID, listener: Listener) -> None:
        """Remove a listener. No-op when it isn't registered for that room."""
        with self._lock:
            listeners = self._rooms.get(room_id)
            if listeners is None:
                return
            listeners.discard(listener)
            if not listeners:
                del self._rooms[room_id]

    def listeners_for(self, room_id: uuid.UUID) -> tuple[Listener, ...]:
        """Point-in-time copy of a room's listeners."""
        with self._lock:
            return tuple(self._rooms.get(room_id, ()))

    def listener_count(self, room_id: uuid.UUID) -> int:
        with self._lock:
            return len(self._rooms.get(room_id, ()))

    def all_listeners(self) -> tuple[Listener, ...]:
        with self._lock:
            return tuple(
                listener for listeners in self._rooms.values() for listener in listeners
            )

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "rooms": len(self._rooms),
                "listeners": sum(len(s) for s in self._rooms.values()),
            }
