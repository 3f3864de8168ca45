"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. The Notifier (and the registry it owns) is built here, once per
app, and stored on app.state; handlers get it through a dependency.
Lifespan handles shutdown: in-flight publishes get a short grace period
to finish. Whatever is left is cancelled and live listeners are woken so
their handlers unwind. The DB pool closes last.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ama import __version__
from ama.api import api_router
from ama.config import settings
from ama.log import configure_logging
from ama.realtime.notifier import Notifier
from ama.services.room_service import StoreError

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    logger.info(
        "ama.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("ama.shutdown")
    notifier = app.state.notifier
    if not await notifier.drain(timeout=settings.close_timeout_seconds):
        logger.warning("ama.shutdown_drain_timeout", pending=notifier.pending)
    await notifier.aclose()

    from ama.db.engine import engine
    await engine.dispose()


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("ama.store_unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"detail": "something went wrong"})


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging(settings.log_level, settings.log_json)

    app = FastAPI(
        title="AMA",
        description="Live Q&A rooms with real-time updates over WebSockets",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.notifier = Notifier(
        send_timeout=settings.send_timeout_seconds,
        close_timeout=settings.close_timeout_seconds,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → CORS → handler

    from ama.middleware.request_id import RequestIdMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["Accept", "Authorization", "Content-Type", "X-CSRF-Token"],
        expose_headers=["Link"],
        max_age=300,
    )
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(StoreError, store_error_handler)

    app.include_router(api_router)

    # WebSocket route — live room events
    from ama.realtime.websocket import router as ws_router
    app.include_router(ws_router)

    return app


# Default app instance (used by uvicorn: ama.main:app)
app = create_app()
