from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import timedelta

import pytest

from chat_realtime.application.exceptions import ForbiddenError, NotFoundError
from tests.conftest import EPOCH, open_connection


@pytest.fixture
def chat(store):
    alice = store.add_actor("alice")
    bob = store.add_actor("bob")
    conv = store.add_conversation(alice, bob)
    return alice, bob, conv


@pytest.mark.asyncio
async def test_typing_skips_the_typists_devices(container, chat):
    alice, bob, conv = chat
    phone, phone_out = await open_connection(container, alice)
    laptop, laptop_out = await open_connection(container, alice)
    b_conn, b_out = await open_connection(container, bob)
    for conn in (phone, laptop, b_conn):
        await container.gateway.join(conn, conv.id)

    delivered = await container.relay.typing_start(phone, conv.id)
    await container.relay.typing_stop(phone, conv.id)
    for conn in (phone, laptop, b_conn):
        await conn.flush()

    assert delivered == 1
    payload = {"conversationId": str(conv.id), "actorId": str(alice.id)}
    assert b_out.of_type("typing:start") == [payload]
    assert b_out.of_type("typing:stop") == [payload]
    assert phone_out.of_type("typing:start") == []
    assert laptop_out.of_type("typing:start") == []


@pytest.mark.asyncio
async def test_typing_requires_joined_room(container, chat):
    alice, _, conv = chat
    conn, _ = await open_connection(container, alice)

    with pytest.raises(ForbiddenError):
        await container.relay.typing_start(conn, conv.id)


@pytest.mark.asyncio
async def test_presence_check_online(container, chat):
    alice, bob, _ = chat
    await open_connection(container, bob)
    conn, out = await open_connection(container, alice)

    await container.relay.presence_check(conn, bob.id)
    await conn.flush()

    assert out.of_type("presence:state") == [
        {"actorId": str(bob.id), "online": True, "lastSeen": None},
    ]


@pytest.mark.asyncio
async def test_presence_check_offline_reports_last_seen(container, store, chat):
    alice, bob, _ = chat
    seen = EPOCH - timedelta(days=1)
    store.actors[bob.id] = replace(store.actors[bob.id], last_seen=seen)
    conn, out = await open_connection(container, alice)

    await container.relay.presence_check(conn, bob.id)
    await conn.flush()

    assert out.of_type("presence:state") == [
        {"actorId": str(bob.id), "online": False, "lastSeen": seen.isoformat()},
    ]


@pytest.mark.asyncio
async def test_presence_check_unknown_actor(container, chat):
    alice, _, _ = chat
    conn, _ = await open_connection(container, alice)

    with pytest.raises(NotFoundError):
        await container.relay.presence_check(conn, uuid.uuid4())
