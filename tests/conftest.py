"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import json
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Iterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import jwt
import pytest
from fastapi.testclient import TestClient

from chat_realtime.app import create_app
from chat_realtime.application.dto.principal import Principal
from chat_realtime.application.exceptions import (
    NotFoundError,
    StorageError,
    UnauthenticatedError,
)
from chat_realtime.config import settings
from chat_realtime.container import Container, build_container
from chat_realtime.domain.entities.actor import Actor
from chat_realtime.domain.entities.conversation import Conversation
from chat_realtime.domain.entities.message import Message
from chat_realtime.domain.value_objects.enums import ConversationKind

EPOCH = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Advances one second per reading so timestamps are strictly ordered."""

    def __init__(self, start: datetime = EPOCH) -> None:
        self._now = start

    def now(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


class FakeVerifier:
    """Accepts any token that is an actor UUID."""

    async def verify(self, token: str) -> Principal:
        try:
            return Principal(actor_id=UUID(token), roles=[])
        except ValueError as exc:
            raise UnauthenticatedError("Invalid token") from exc


class FakeTransport:
    def __init__(self, *, blocked: bool = False) -> None:
        self.accepted = False
        self.sent: list[str] = []
        self.closed_with: tuple[int, str | None] | None = None
        self.gate = asyncio.Event()
        if not blocked:
            self.gate.set()

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, data: str) -> None:
        await self.gate.wait()
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.closed_with = (code, reason)

    def events(self) -> list[dict[str, Any]]:
        return [json.loads(raw) for raw in self.sent]

    def of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [e["data"] for e in self.events() if e["type"] == event_type]


@dataclass
class InMemoryStore:
    """Backing data shared by every FakeUoW the factory opens."""

    actors: dict[UUID, Actor] = field(default_factory=dict)
    conversations: dict[UUID, Conversation] = field(default_factory=dict)
    messages: dict[UUID, Message] = field(default_factory=dict)
    fail_last_seen: bool = False
    fail_message_writes: bool = False
    # Awaited inside update_last_seen, before the write
    on_last_seen: Callable[[], Awaitable[Any]] | None = None
    commits: int = 0

    def add_actor(self, name: str = "alice") -> Actor:
        actor = Actor(
            id=uuid.uuid4(),
            display_name=name.title(),
            username=name,
            avatar_url=f"https://cdn.example.com/{name}.png",
        )
        self.actors[actor.id] = actor
        return actor

    def add_conversation(
        self,
        *members: Actor,
        kind: str = ConversationKind.GROUP,
        admins: Iterable[Actor] | None = None,
    ) -> Conversation:
        if admins is None:
            admins = members[:1] if kind == ConversationKind.GROUP else ()
        conversation = Conversation(
            id=uuid.uuid4(),
            kind=kind,
            name="Test room" if kind == ConversationKind.GROUP else None,
            created_at=EPOCH,
            member_ids=frozenset(a.id for a in members),
            admin_ids=frozenset(a.id for a in admins),
        )
        self.conversations[conversation.id] = conversation
        return conversation

    def remove_member(self, conversation_id: UUID, actor: Actor) -> None:
        conv = self.conversations[conversation_id]
        self.conversations[conversation_id] = replace(
            conv,
            member_ids=conv.member_ids - {actor.id},
            admin_ids=conv.admin_ids - {actor.id},
        )

    def add_message(
        self,
        conversation: Conversation,
        sender: Actor,
        text: str = "hello",
        *,
        at: datetime | None = None,
    ) -> Message:
        ts = at or EPOCH + timedelta(minutes=len(self.messages))
        msg = Message(
            id=uuid.uuid4(),
            conversation_id=conversation.id,
            sender_id=sender.id,
            text=text,
            created_at=ts,
            updated_at=ts,
            read_by=frozenset({sender.id}),
        )
        self.messages[msg.id] = msg
        return msg

    @asynccontextmanager
    async def uow(self) -> AsyncIterator[FakeUoW]:
        yield FakeUoW(self)


@dataclass
class FakeActorReader:
    _store: InMemoryStore

    async def get_by_id(self, actor_id: UUID) -> Actor | None:
        return self._store.actors.get(actor_id)

    async def get_many(self, actor_ids: Iterable[UUID]) -> dict[UUID, Actor]:
        return {a: self._store.actors[a] for a in actor_ids if a in self._store.actors}


@dataclass
class FakeActorWriter:
    _store: InMemoryStore

    async def create(self, actor: Actor) -> Actor:
        self._store.actors[actor.id] = actor
        return actor

    async def update_last_seen(self, actor_id: UUID, ts: datetime) -> None:
        if self._store.on_last_seen is not None:
            await self._store.on_last_seen()
        if self._store.fail_last_seen:
            raise StorageError("Storage operation failed")
        actor = self._store.actors.get(actor_id)
        if actor is None:
            raise NotFoundError("Actor not found")
        if actor.last_seen is None or actor.last_seen < ts:
            self._store.actors[actor_id] = replace(actor, last_seen=ts)


@dataclass
class FakeConversationReader:
    _store: InMemoryStore

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        return self._store.conversations.get(conversation_id)


@dataclass
class FakeConversationWriter:
    _store: InMemoryStore

    async def create(self, conversation: Conversation) -> Conversation:
        conversation.check_invariants()
        self._store.conversations[conversation.id] = conversation
        return conversation

    async def touch_last_activity(self, conversation_id: UUID, ts: datetime) -> None:
        conv = self._store.conversations[conversation_id]
        if conv.last_activity_at is None or conv.last_activity_at < ts:
            self._store.conversations[conversation_id] = replace(conv, last_activity_at=ts)


@dataclass
class FakeMemberReader:
    _store: InMemoryStore

    async def is_member(self, conversation_id: UUID, actor_id: UUID) -> bool:
        conv = self._store.conversations.get(conversation_id)
        return conv is not None and actor_id in conv.member_ids


@dataclass
class FakeMessageReader:
    _store: InMemoryStore

    async def get_by_id(self, message_id: UUID) -> Message | None:
        return self._store.messages.get(message_id)

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        before: UUID | None = None,
        limit: int = 50,
    ) -> list[Message]:
        history = sorted(
            (m for m in self._store.messages.values() if m.conversation_id == conversation_id),
            key=lambda m: (m.created_at, m.id),
        )
        if before is not None:
            pivot = self._store.messages.get(before)
            if pivot is None or pivot.conversation_id != conversation_id:
                return []
            history = [m for m in history if (m.created_at, m.id) < (pivot.created_at, pivot.id)]
        return history[-limit:]


@dataclass
class FakeMessageWriter:
    _store: InMemoryStore

    async def create(self, message: Message) -> Message:
        if self._store.fail_message_writes:
            raise StorageError("Storage operation failed")
        self._store.messages[message.id] = message
        return message

    async def update_text(self, message_id: UUID, text: str, ts: datetime) -> None:
        msg = self._store.messages[message_id]
        if not msg.is_deleted:
            self._store.messages[message_id] = msg.with_text(text, ts)

    async def soft_delete(self, message_id: UUID, placeholder: str, ts: datetime) -> None:
        msg = self._store.messages[message_id]
        self._store.messages[message_id] = msg.soft_deleted(placeholder, ts)

    async def add_reader(self, conversation_id: UUID, actor_id: UUID) -> int:
        marked = 0
        for msg in list(self._store.messages.values()):
            if msg.conversation_id == conversation_id and actor_id not in msg.read_by:
                self._store.messages[msg.id] = msg.read_by_actor(actor_id)
                marked += 1
        return marked


class FakeUoW:
    """In-memory UoW for unit tests."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self.actors = FakeActorReader(store)
        self.actors_w = FakeActorWriter(store)
        self.conversations = FakeConversationReader(store)
        self.conversations_w = FakeConversationWriter(store)
        self.members = FakeMemberReader(store)
        self.messages = FakeMessageReader(store)
        self.messages_w = FakeMessageWriter(store)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._store.commits += 1

    async def rollback(self) -> None:
        pass


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow(store: InMemoryStore) -> FakeUoW:
    return FakeUoW(store)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def container(store: InMemoryStore, clock: FakeClock) -> Container:
    return build_container(settings, store.uow, verifier=FakeVerifier(), clock=clock)


async def open_connection(
    container: Container, actor: Actor, *, transport: FakeTransport | None = None
) -> tuple[Any, FakeTransport]:
    transport = transport or FakeTransport()
    conn = await container.gateway.connect(transport, str(actor.id))
    return conn, transport


def make_token(actor_id: Any) -> str:
    return jwt.encode(
        {"sub": str(actor_id), "roles": []},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def auth(actor: Actor) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(actor.id)}"}


class ReadinessCheck:
    """Storage readiness check that fails once ``error`` is set."""

    def __init__(self) -> None:
        self.error: Exception | None = None

    async def __call__(self) -> None:
        if self.error is not None:
            raise self.error


@pytest.fixture
def readiness() -> ReadinessCheck:
    return ReadinessCheck()


@pytest.fixture
def client(store: InMemoryStore, readiness: ReadinessCheck) -> Iterator[TestClient]:
    app = create_app(uow_factory=store.uow, clock=FakeClock(), storage_check=readiness)
    # One event loop for every request and socket in a test
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
