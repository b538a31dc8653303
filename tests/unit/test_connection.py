from __future__ import annotations

import asyncio
import json
import uuid

import pytest

from chat_realtime.infrastructure.ws.connection import TRY_AGAIN_LATER, Connection
from chat_realtime.infrastructure.ws.rooms import RoomRouter
from chat_realtime.services.lifecycle import MessageLifecycleManager
from tests.conftest import FakeClock, FakeTransport


@pytest.mark.asyncio
async def test_events_are_written_in_order():
    transport = FakeTransport()
    conn = Connection(transport, uuid.uuid4())
    conn.start()

    for i in range(10):
        assert conn.send("ping", {"n": i})
    await conn.flush()
    await conn.close()

    assert [e["data"]["n"] for e in transport.events()] == list(range(10))
    assert json.loads(transport.sent[0]) == {"type": "ping", "data": {"n": 0}}


@pytest.mark.asyncio
async def test_full_queue_closes_the_connection():
    transport = FakeTransport()
    conn = Connection(transport, uuid.uuid4(), queue_size=2)

    assert conn.send("a", {})
    assert conn.send("b", {})
    assert conn.send("c", {}) is False
    await asyncio.sleep(0)

    assert conn.closed
    assert transport.closed_with == (TRY_AGAIN_LATER, "Too slow")
    assert conn.send("d", {}) is False


@pytest.mark.asyncio
async def test_failed_write_stops_the_writer():
    class BrokenTransport(FakeTransport):
        async def send_text(self, data: str) -> None:
            raise ConnectionResetError

    conn = Connection(BrokenTransport(), uuid.uuid4())
    conn.start()
    conn.send("a", {})
    conn.send("b", {})

    await asyncio.wait_for(conn.flush(), timeout=1)
    assert conn.closed
    await conn.close()


@pytest.mark.asyncio
async def test_slow_member_does_not_hold_up_the_room(store):
    alice = store.add_actor("alice")
    bob = store.add_actor("bob")
    carol = store.add_actor("carol")
    conv = store.add_conversation(alice, bob, carol)
    rooms = RoomRouter()
    lifecycle = MessageLifecycleManager(store.uow, rooms, clock=FakeClock())

    slow_out = FakeTransport(blocked=True)
    slow = Connection(slow_out, bob.id, queue_size=3)
    fast_out = FakeTransport()
    fast = Connection(fast_out, carol.id, queue_size=3)
    for conn in (slow, fast):
        conn.start()
        await rooms.join(conn, conv.id)

    for i in range(8):
        await lifecycle.create(alice.id, conv.id, f"m{i}")
        await fast.flush()
    await asyncio.sleep(0)

    assert [e["text"] for e in fast_out.of_type("message:new")] == [f"m{i}" for i in range(8)]
    assert slow.closed
    assert slow_out.closed_with == (TRY_AGAIN_LATER, "Too slow")
    await slow.close()
    await fast.close()
