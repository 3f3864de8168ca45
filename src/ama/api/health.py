"""Health and diagnostics endpoints.

Learn: /health verifies the server is running, Postgres is reachable,
and reports how many live listeners this process is holding.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy import text

from ama import __version__
from ama.api.dependencies import get_notifier
from ama.db.engine import engine
from ama.realtime.notifier import Notifier

router = APIRouter()


@router.get("/health")
async def health_check(notifier: Notifier = Depends(get_notifier)):
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["postgres"] = "ok"
    except Exception as e:
        checks["postgres"] = f"error: {e}"

    status = "healthy" if checks["postgres"] == "ok" else "degraded"
    realtime = {**notifier.registry.stats(), "pending_publishes": notifier.pending}
    return {"status": status, **checks, "realtime": realtime}


@router.get("/echo/{message}", response_class=PlainTextResponse)
async def echo(message: str):
    return message
