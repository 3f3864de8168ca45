"""FastAPI dependencies shared by the HTTP routes and the WebSocket route.

Learn: The Notifier is built once in create_app() and parked on
app.state. Handlers reach it through get_notifier instead of importing a
module-level global, so tests can swap in their own instance with
app.dependency_overrides, the same way the Store is swapped.

HTTPConnection (not Request) so the same dependency works for WebSockets.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import HTTPConnection

from ama.db.engine import get_db
from ama.realtime.notifier import Notifier
from ama.services.room_service import RoomService


def get_room_service(db: AsyncSession = Depends(get_db)) -> RoomService:
    return RoomService(db)


def get_notifier(conn: HTTPConnection) -> Notifier:
    return conn.app.state.notifier
