"""Room and message API routes.

Learn: Every write route follows the same three steps:
1. Validate — pydantic bodies and uuid.UUID path params (422 on failure)
2. Store — RoomService does the work; NotFoundError → 404
3. Notify — build the event and hand it to notifier.dispatch()

Step 3 only runs after the Store succeeded, and it doesn't wait:
the HTTP response depends on the Store alone, never on delivery.
StoreError is handled app-wide in main.py (→ 500).
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response

from ama.api.dependencies import get_notifier, get_room_service
from ama.events.types import MessageCreated, ReactionChanged
from ama.realtime.notifier import Notifier
from ama.schemas.room import (
    CreatedRead,
    MessageCreate,
    MessageRead,
    ReactionRead,
    RoomCreate,
    RoomRead,
)
from ama.services.room_service import NotFoundError, RoomService

router = APIRouter()


# ─── Rooms ──────────────────────────────────────────────

@router.post("/rooms", response_model=CreatedRead, status_code=201)
async def create_room(body: RoomCreate, svc: RoomService = Depends(get_room_service)):
    room_id = await svc.insert_room(body.theme)
    return CreatedRead(id=room_id)


@router.get("/rooms", response_model=list[RoomRead])
async def list_rooms(svc: RoomService = Depends(get_room_service)):
    return await svc.get_rooms()


# ─── Messages ───────────────────────────────────────────

@router.post("/rooms/{room_id}/messages", response_model=CreatedRead, status_code=201)
async def create_message(
    room_id: uuid.UUID,
    body: MessageCreate,
    svc: RoomService = Depends(get_room_service),
    notifier: Notifier = Depends(get_notifier),
):
    """Post a question. Live listeners get a message_created event."""
    try:
        message_id = await svc.insert_message(room_id, body.message)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    notifier.dispatch(MessageCreated(room_id=room_id, message_id=message_id, text=body.message))
    return CreatedRead(id=message_id)


@router.get("/rooms/{room_id}/messages", response_model=list[MessageRead])
async def list_messages(room_id: uuid.UUID, svc: RoomService = Depends(get_room_service)):
    try:
        return await svc.get_room_messages(room_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/rooms/{room_id}/messages/{message_id}", response_model=MessageRead)
async def get_message(
    room_id: uuid.UUID,
    message_id: uuid.UUID,
    svc: RoomService = Depends(get_room_service),
):
    try:
        return await svc.get_message(room_id, message_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ─── Reactions / answers ────────────────────────────────

@router.patch("/rooms/{room_id}/messages/{message_id}/react", response_model=ReactionRead)
async def react_to_message(
    room_id: uuid.UUID,
    message_id: uuid.UUID,
    svc: RoomService = Depends(get_room_service),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        count = await svc.react_to_message(room_id, message_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    notifier.dispatch(ReactionChanged(room_id=room_id, message_id=message_id))
    return ReactionRead(id=message_id, reaction_count=count)


@router.delete("/rooms/{room_id}/messages/{message_id}/react", response_model=ReactionRead)
async def remove_reaction(
    room_id: uuid.UUID,
    message_id: uuid.UUID,
    svc: RoomService = Depends(get_room_service),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        count = await svc.remove_reaction(room_id, message_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    notifier.dispatch(ReactionChanged(room_id=room_id, message_id=message_id))
    return ReactionRead(id=message_id, reaction_count=count)


@router.patch("/rooms/{room_id}/messages/{message_id}/answer", status_code=204)
async def mark_answered(
    room_id: uuid.UUID,
    message_id: uuid.UUID,
    svc: RoomService = Depends(get_room_service),
    notifier: Notifier = Depends(get_notifier),
):
    """Mark a question answered. A failed update publishes nothing."""
    try:
        await svc.mark_answered(room_id, message_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    notifier.dispatch(ReactionChanged(room_id=room_id, message_id=message_id))
    return Response(status_code=204)
