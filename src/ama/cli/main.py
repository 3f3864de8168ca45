"""AMA CLI — run the server and drive rooms from the terminal.

Usage:
    ama serve --port 8080                         # Run the API + WebSocket server
    ama --api-url http://host:8080 rooms         # Point at another backend
    ama rooms                                     # List rooms
    ama create-room "Friday AMA"                  # Create a room, prints its id
    ama messages <room_id>                        # List a room's questions
    ama post <room_id> "what's next?"             # Ask a question
    ama react <room_id> <message_id>              # +1 a question
    ama unreact <room_id> <message_id>            # Take the +1 back
    ama answer <room_id> <message_id>             # Mark a question answered
"""

from __future__ import annotations

import asyncio
import concurrent.futures

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8080"

# Set once by the `main` group from --api-url / AMA_API_URL
_api_url = DEFAULT_API_URL


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the AMA backend."""
    return httpx.AsyncClient(base_url=_api_url, timeout=10.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _check(r: httpx.Response) -> httpx.Response:
    """Fail the command with the server's error detail on a non-2xx response."""
    if r.is_success:
        return r
    try:
        detail = r.json().get("detail", r.text)
    except ValueError:
        detail = r.text
    raise click.ClickException(f"{r.status_code}: {detail}")


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "-"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--api-url",
    envvar="AMA_API_URL",
    default=DEFAULT_API_URL,
    show_default=True,
    help="Base URL of the AMA backend (env: AMA_API_URL)",
)
@click.version_option(version="0.1.0", prog_name="ama")
def main(api_url: str):
    """AMA — live Q&A rooms."""
    global _api_url
    _api_url = api_url.rstrip("/")


@main.command()
@click.option("--host", default=None, help="Bind address (default: AMA_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: AMA_PORT)")
@click.option("--reload", is_flag=True, help="Restart on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the HTTP + WebSocket server."""
    import uvicorn

    from ama.config import settings

    uvicorn.run(
        "ama.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------------


@main.command()
def rooms():
    """List rooms."""
    _run(_rooms_impl())


async def _rooms_impl():
    async with _client() as c:
        r = _check(await c.get("/api/rooms"))
    rows = r.json()
    if not rows:
        click.echo("No rooms yet.")
        return
    _print_table(rows, [("ID", "id", 36), ("THEME", "theme", 40)])


@main.command("create-room")
@click.argument("theme")
def create_room(theme: str):
    """Create a room and print its id."""
    _run(_create_room_impl(theme))


async def _create_room_impl(theme: str):
    async with _client() as c:
        r = _check(await c.post("/api/rooms", json={"theme": theme}))
    click.echo(r.json()["id"])


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


@main.command()
@click.argument("room_id")
def messages(room_id: str):
    """List a room's questions."""
    _run(_messages_impl(room_id))


async def _messages_impl(room_id: str):
    async with _client() as c:
        r = _check(await c.get(f"/api/rooms/{room_id}/messages"))
    rows = r.json()
    if not rows:
        click.echo("No questions yet.")
        return
    for row in rows:
        row["state"] = "answered" if row["answered"] else "open"
    _print_table(rows, [
        ("ID", "id", 36),
        ("+1", "reaction_count", 4),
        ("STATE", "state", 8),
        ("MESSAGE", "message", 50),
    ])


@main.command()
@click.argument("room_id")
@click.argument("text")
def post(room_id: str, text: str):
    """Post a question to a room and print its id."""
    _run(_post_impl(room_id, text))


async def _post_impl(room_id: str, text: str):
    async with _client() as c:
        r = _check(await c.post(f"/api/rooms/{room_id}/messages", json={"message": text}))
    click.echo(r.json()["id"])


@main.command()
@click.argument("room_id")
@click.argument("message_id")
def react(room_id: str, message_id: str):
    """Add a reaction to a question."""
    _run(_reaction_impl("PATCH", room_id, message_id))


@main.command()
@click.argument("room_id")
@click.argument("message_id")
def unreact(room_id: str, message_id: str):
    """Remove a reaction from a question."""
    _run(_reaction_impl("DELETE", room_id, message_id))


async def _reaction_impl(method: str, room_id: str, message_id: str):
    async with _client() as c:
        r = _check(await c.request(method, f"/api/rooms/{room_id}/messages/{message_id}/react"))
    click.echo(f"{message_id}: {r.json()['reaction_count']} reaction(s)")


@main.command()
@click.argument("room_id")
@click.argument("message_id")
def answer(room_id: str, message_id: str):
    """Mark a question as answered."""
    _run(_answer_impl(room_id, message_id))


async def _answer_impl(room_id: str, message_id: str):
    async with _client() as c:
        _check(await c.patch(f"/api/rooms/{room_id}/messages/{message_id}/answer"))
    click.secho(f"{message_id}: answered", fg="green")


if __name__ == "__main__":
    main()
