"""WebSocket endpoint — live room events for connected clients.

Learn: Each client connects to /subscribe/{room_id}. The handler:
1. Checks the room exists (HTTP 404 denial instead of an upgrade if it doesn't)
2. Accepts the upgrade and registers a listener with the notifier
3. Drains client frames in a reader task — a disconnect cancels the listener
4. Waits on the listener's cancellation, then unwinds

The listener can also be cancelled from the outside: a failed push from
the notifier, or shutdown. Whichever fires first, cleanup runs once.
"""

import asyncio
import uuid

import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.responses import PlainTextResponse
from starlette.websockets import WebSocketState

from ama.api.dependencies import get_notifier, get_room_service
from ama.realtime.listener import Listener
from ama.realtime.notifier import Notifier
from ama.services.room_service import NotFoundError, RoomService, StoreError

logger = structlog.get_logger()
router = APIRouter()


class WebSocketChannel:
    """Adapts a Starlette WebSocket to the listener Channel protocol."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    async def send_text(self, data: str) -> None:
        await self.websocket.send_text(data)

    async def close(self) -> None:
        # Nothing to do if the client already hung up
        if (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        ):
            await self.websocket.close()


async def _read_until_disconnect(websocket: WebSocket, listener: Listener) -> None:
    """Client → server frames carry no meaning; only the disconnect matters."""
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.warning("realtime.read_failed", listener_id=listener.id, error=repr(e))
    finally:
        listener.cancel()


@router.websocket("/subscribe/{room_id}")
async def subscribe(
    websocket: WebSocket,
    room_id: uuid.UUID,
    svc: RoomService = Depends(get_room_service),
    notifier: Notifier = Depends(get_notifier),
):
    """Stream a room's events until the client leaves or the server stops."""
    # ── Pending: the room must exist ────────────────────────
    # A close before accept reaches real clients as a bare 403, so
    # rejections go out as plain HTTP responses instead of an upgrade.
    try:
        await svc.get_room(room_id)
    except NotFoundError:
        logger.info("realtime.subscribe_rejected", room_id=str(room_id), reason="room not found")
        await websocket.send_denial_response(
            PlainTextResponse("room not found", status_code=404)
        )
        return
    except StoreError:
        await websocket.send_denial_response(
            PlainTextResponse("something went wrong", status_code=500)
        )
        return
    finally:
        # Release the pooled DB connection before the long-lived wait
        await svc.close()

    await websocket.accept()
    client = websocket.client.host if websocket.client else "unknown"

    # ── Active: registered before we suspend ────────────────
    async with notifier.subscribe(room_id, WebSocketChannel(websocket)) as listener:
        logger.info(
            "realtime.client_connected",
            listener_id=listener.id,
            room_id=str(room_id),
            client_ip=client,
        )
        reader = asyncio.create_task(_read_until_disconnect(websocket, listener))
        try:
            await listener.wait()
        finally:
            reader.cancel()
            await asyncio.gather(reader, return_exceptions=True)
