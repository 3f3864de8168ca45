"""Listener state machine tests."""

import asyncio
import uuid

import pytest

from ama.realtime.listener import Listener, ListenerState
from fakes import FakeChannel


class HangingCloseChannel(FakeChannel):
    async def close(self) -> None:
        self.close_calls += 1
        await asyncio.Event().wait()


@pytest.mark.asyncio
async def test_lifecycle_pending_active_closing_closed():
    channel = FakeChannel()
    listener = Listener(channel, uuid.uuid4())
    assert listener.state is ListenerState.PENDING

    listener.activate()
    assert listener.state is ListenerState.ACTIVE

    listener.cancel()
    assert listener.state is ListenerState.CLOSING
    assert listener.cancelled

    await listener.close()
    assert listener.state is ListenerState.CLOSED
    assert channel.close_calls == 1


@pytest.mark.asyncio
async def test_activate_only_from_pending():
    listener = Listener(FakeChannel(), uuid.uuid4())
    listener.activate()
    with pytest.raises(RuntimeError):
        listener.activate()


@pytest.mark.asyncio
async def test_cancel_releases_waiter_and_is_idempotent():
    listener = Listener(FakeChannel(), uuid.uuid4())
    listener.activate()
    waiter = asyncio.create_task(listener.wait())
    await asyncio.sleep(0)
    assert not waiter.done()

    listener.cancel()
    listener.cancel()
    await asyncio.wait_for(waiter, 1)
    assert listener.state is ListenerState.CLOSING


@pytest.mark.asyncio
async def test_send_only_while_active():
    channel = FakeChannel()
    listener = Listener(channel, uuid.uuid4())

    assert await listener.send('{"kind": "x"}') is False
    assert channel.send_attempts == 0

    listener.activate()
    assert await listener.send('{"kind": "x"}') is True
    assert channel.sent == [{"kind": "x"}]

    listener.cancel()
    assert await listener.send('{"kind": "y"}') is False
    assert channel.send_attempts == 1


@pytest.mark.asyncio
async def test_failed_send_cancels():
    channel = FakeChannel(fail=True)
    listener = Listener(channel, uuid.uuid4())
    listener.activate()

    assert await listener.send("{}") is False
    assert listener.cancelled
    assert listener.state is ListenerState.CLOSING


@pytest.mark.asyncio
async def test_slow_send_times_out_and_cancels():
    channel = FakeChannel(hang=True)
    listener = Listener(channel, uuid.uuid4(), send_timeout=0.05)
    listener.activate()

    assert await asyncio.wait_for(listener.send("{}"), 1) is False
    assert listener.cancelled


@pytest.mark.asyncio
async def test_close_runs_once_and_is_bounded():
    channel = HangingCloseChannel()
    listener = Listener(channel, uuid.uuid4(), close_timeout=0.05)
    listener.activate()
    listener.cancel()

    await asyncio.wait_for(listener.close(), 1)
    await listener.close()

    assert channel.close_calls == 1
    assert listener.state is ListenerState.CLOSED
