"""CLI tests — commands run against the in-process app.

Learn: _client() is the single place the CLI builds its HTTP client, so
patching it to use ASGITransport routes every command straight into the
app under test. The tests are sync; the CLI runs its own event loop.
"""

import uuid

import pytest
from click.testing import CliRunner
from httpx import ASGITransport, AsyncClient

from ama.cli import main as cli


@pytest.fixture()
def runner(app, monkeypatch):
    monkeypatch.setattr(
        cli,
        "_client",
        lambda: AsyncClient(transport=ASGITransport(app=app), base_url="http://test"),
    )
    return CliRunner()


def test_help_lists_commands(runner):
    result = runner.invoke(cli.main, ["--help"])
    assert result.exit_code == 0
    for command in ("serve", "rooms", "create-room", "post", "react", "answer"):
        assert command in result.output


def test_create_room_prints_id(runner, store):
    result = runner.invoke(cli.main, ["create-room", "Friday AMA"])
    assert result.exit_code == 0, result.output
    room_id = uuid.UUID(result.stdout.strip())
    assert store.rooms[room_id].theme == "Friday AMA"


def test_rooms_empty(runner):
    result = runner.invoke(cli.main, ["rooms"])
    assert result.exit_code == 0
    assert "No rooms yet." in result.output


def test_post_and_list_messages(runner, store):
    room_id = str(store.add_room("AMA"))

    posted = runner.invoke(cli.main, ["post", room_id, "what's next?"])
    assert posted.exit_code == 0, posted.output
    message_id = posted.stdout.strip()

    runner.invoke(cli.main, ["react", room_id, message_id])
    runner.invoke(cli.main, ["answer", room_id, message_id])

    listed = runner.invoke(cli.main, ["messages", room_id])
    assert listed.exit_code == 0
    assert message_id in listed.output
    assert "what's next?" in listed.output
    assert "answered" in listed.output


def test_react_and_unreact(runner, store):
    room_id = store.add_room()
    posted = runner.invoke(cli.main, ["post", str(room_id), "q"])
    message_id = posted.stdout.strip()

    result = runner.invoke(cli.main, ["react", str(room_id), message_id])
    assert f"{message_id}: 1 reaction(s)" in result.output

    result = runner.invoke(cli.main, ["unreact", str(room_id), message_id])
    assert f"{message_id}: 0 reaction(s)" in result.output


def test_post_to_unknown_room_fails(runner):
    result = runner.invoke(cli.main, ["post", str(uuid.uuid4()), "hello"])
    assert result.exit_code == 1
    assert "404: room not found" in result.output


def test_api_url_option(runner, monkeypatch):
    monkeypatch.setattr(cli, "_api_url", cli.DEFAULT_API_URL)
    result = runner.invoke(cli.main, ["--api-url", "http://ama.internal:9000/", "rooms"])
    assert result.exit_code == 0, result.output
    assert cli._api_url == "http://ama.internal:9000"


def test_command_output_carries_no_log_lines(runner, store):
    """The app logs every request; none of it may leak into stdout."""
    room_id = str(store.add_room())

    result = runner.invoke(cli.main, ["post", room_id, "hello"])
    assert result.exit_code == 0, result.output
    assert "http.request" not in result.stdout
    assert "message.created" not in result.stdout
    assert len(result.stdout.splitlines()) == 1
    uuid.UUID(result.stdout.strip())
