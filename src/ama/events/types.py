"""Realtime event types.

Learn: Events are immutable value objects built by the write handlers
after the Store has accepted a change. They carry the room id as routing
metadata for the notifier, but the room id is never part of the payload
a listener receives; listeners already know which room they joined.

Wire shape:
    {"kind": "message_created",  "value": {"id": "<uuid>", "message": "..."}}
    {"kind": "message_reaction", "value": {"id": "<uuid>"}}
"""

import json
import uuid
from dataclasses import dataclass
from typing import Any, ClassVar, Union

# ─── Kinds ───────────────────────────────────────────────

MESSAGE_CREATED = "message_created"
MESSAGE_REACTION = "message_reaction"


# ─── Variants ────────────────────────────────────────────


@dataclass(frozen=True)
class MessageCreated:
    """A question was posted to a room."""

    kind: ClassVar[str] = MESSAGE_CREATED

    room_id: uuid.UUID
    message_id: uuid.UUID
    text: str

    def value(self) -> dict[str, Any]:
        return {"id": str(self.message_id), "message": self.text}


@dataclass(frozen=True)
class ReactionChanged:
    """A message's reaction count or answered flag changed."""

    kind: ClassVar[str] = MESSAGE_REACTION

    room_id: uuid.UUID
    message_id: uuid.UUID

    def value(self) -> dict[str, Any]:
        return {"id": str(self.message_id)}


Event = Union[MessageCreated, ReactionChanged]


def to_wire(event: Event) -> dict[str, Any]:
    """Build the listener-facing envelope. Drops the routing room id."""
    return {"kind": event.kind, "value": event.value()}


def encode(event: Event) -> str:
    return json.dumps(to_wire(event))
