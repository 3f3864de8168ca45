"""Event wire-format tests."""

import dataclasses
import json
import uuid

import pytest

from ama.events.types import (
    MESSAGE_CREATED,
    MESSAGE_REACTION,
    MessageCreated,
    ReactionChanged,
    encode,
    to_wire,
)


def test_message_created_wire_shape():
    room_id, message_id = uuid.uuid4(), uuid.uuid4()
    event = MessageCreated(room_id=room_id, message_id=message_id, text="hello")

    assert to_wire(event) == {
        "kind": MESSAGE_CREATED,
        "value": {"id": str(message_id), "message": "hello"},
    }


def test_reaction_changed_wire_shape():
    message_id = uuid.uuid4()
    event = ReactionChanged(room_id=uuid.uuid4(), message_id=message_id)

    assert to_wire(event) == {"kind": MESSAGE_REACTION, "value": {"id": str(message_id)}}


def test_room_id_never_serialized():
    room_id = uuid.uuid4()
    payload = encode(MessageCreated(room_id=room_id, message_id=uuid.uuid4(), text="q"))

    assert str(room_id) not in payload
    assert set(json.loads(payload)) == {"kind", "value"}


def test_events_are_immutable():
    event = ReactionChanged(room_id=uuid.uuid4(), message_id=uuid.uuid4())
    with pytest.raises(dataclasses.FrozenInstanceError):
        event.message_id = uuid.uuid4()
