"""API route aggregation.

All routers registered here get mounted in main.py under /api.
There is no auth layer: every route is open.
"""

from fastapi import APIRouter

from ama.api.health import router as health_router
from ama.api.rooms import router as rooms_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(rooms_router, tags=["rooms", "messages"])
