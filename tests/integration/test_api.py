"""REST API against an in-memory store, through the real app and HS256 auth."""
from __future__ import annotations

import uuid

import pytest

from tests.conftest import auth, make_token


@pytest.fixture
def chat(store):
    alice = store.add_actor("alice")
    bob = store.add_actor("bob")
    conv = store.add_conversation(alice, bob)
    return alice, bob, conv


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.headers["X-Request-ID"]

    resp = client.get("/healthz", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"


def test_readyz(client, readiness):
    resp = client.get("/readyz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ready"

    readiness.error = ConnectionRefusedError("db down")
    resp = client.get("/readyz")
    assert resp.status_code == 503
    assert resp.json()["errors"] == ["postgres: db down"]


def test_send_message(client, store, chat):
    alice, _, conv = chat

    resp = client.post(
        f"/api/v1/chat/conversations/{conv.id}/messages",
        headers=auth(alice),
        json={"text": "hello world"},
    )

    assert resp.status_code == 201
    data = resp.json()
    assert data["text"] == "hello world"
    assert data["conversationId"] == str(conv.id)
    assert data["sender"]["displayName"] == "Alice"
    assert data["readBy"] == [str(alice.id)]
    assert data["isDeleted"] is False
    assert uuid.UUID(data["id"]) in store.messages


def test_send_blank_message(client, chat):
    alice, _, conv = chat

    resp = client.post(
        f"/api/v1/chat/conversations/{conv.id}/messages",
        headers=auth(alice),
        json={"text": "  "},
    )
    assert resp.status_code == 422


def test_send_to_foreign_conversation(client, store, chat):
    _, _, conv = chat
    outsider = store.add_actor("mallory")

    resp = client.post(
        f"/api/v1/chat/conversations/{conv.id}/messages",
        headers=auth(outsider),
        json={"text": "let me in"},
    )
    assert resp.status_code == 403

    resp = client.post(
        f"/api/v1/chat/conversations/{uuid.uuid4()}/messages",
        headers=auth(outsider),
        json={"text": "anyone?"},
    )
    assert resp.status_code == 404


def test_list_messages(client, store, chat):
    alice, bob, conv = chat
    msgs = [store.add_message(conv, alice, f"m{i}") for i in range(4)]

    resp = client.get(
        f"/api/v1/chat/conversations/{conv.id}/messages",
        headers=auth(bob),
        params={"limit": 2},
    )
    assert resp.status_code == 200
    assert [m["text"] for m in resp.json()] == ["m2", "m3"]

    resp = client.get(
        f"/api/v1/chat/conversations/{conv.id}/messages",
        headers=auth(bob),
        params={"before": str(msgs[2].id)},
    )
    assert [m["text"] for m in resp.json()] == ["m0", "m1"]


def test_edit_and_delete(client, store, chat):
    alice, bob, conv = chat
    msg = store.add_message(conv, alice, "typo")

    resp = client.patch(
        f"/api/v1/chat/messages/{msg.id}", headers=auth(bob), json={"text": "hijack"},
    )
    assert resp.status_code == 403

    resp = client.patch(
        f"/api/v1/chat/messages/{msg.id}", headers=auth(alice), json={"text": "fixed"},
    )
    assert resp.status_code == 200
    assert resp.json()["text"] == "fixed"

    resp = client.delete(f"/api/v1/chat/messages/{msg.id}", headers=auth(alice))
    assert resp.status_code == 204
    assert store.messages[msg.id].is_deleted

    resp = client.patch(
        f"/api/v1/chat/messages/{msg.id}", headers=auth(alice), json={"text": "undo"},
    )
    assert resp.status_code == 409


def test_delete_unknown_message(client, chat):
    alice, _, _ = chat
    resp = client.delete(f"/api/v1/chat/messages/{uuid.uuid4()}", headers=auth(alice))
    assert resp.status_code == 404


def test_mark_read(client, store, chat):
    alice, bob, conv = chat
    store.add_message(conv, alice)
    store.add_message(conv, alice)

    resp = client.post(f"/api/v1/chat/conversations/{conv.id}/read", headers=auth(bob))
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "marked": 2}

    resp = client.post(f"/api/v1/chat/conversations/{conv.id}/read", headers=auth(bob))
    assert resp.json()["marked"] == 0


def test_presence(client, chat):
    alice, bob, _ = chat

    resp = client.get("/api/v1/chat/presence", headers=auth(alice))
    assert resp.status_code == 200
    assert resp.json() == {"actorIds": []}

    resp = client.get(f"/api/v1/chat/presence/{bob.id}", headers=auth(alice))
    assert resp.json() == {"actorId": str(bob.id), "online": False, "lastSeen": None}

    resp = client.get(f"/api/v1/chat/presence/{uuid.uuid4()}", headers=auth(alice))
    assert resp.status_code == 404


def test_unauthorized_returns_401(client, chat):
    _, _, conv = chat
    url = f"/api/v1/chat/conversations/{conv.id}/messages"

    assert client.get(url).status_code == 401
    resp = client.get(url, headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    resp = client.get(url, headers={"Authorization": f"Bearer {make_token('42')}"})
    assert resp.status_code == 401
