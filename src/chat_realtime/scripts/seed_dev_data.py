"""Seed development data: two actors, a direct and a group conversation.

Prints an HS256 token per actor for connecting to ``/ws/chat?token=...``.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

import jwt

from chat_realtime.config import settings
from chat_realtime.domain.entities.actor import Actor
from chat_realtime.domain.entities.conversation import Conversation
from chat_realtime.domain.entities.message import Message
from chat_realtime.domain.value_objects.enums import ConversationKind
from chat_realtime.infrastructure.db.session import create_schema
from chat_realtime.infrastructure.db.uow import sqlalchemy_uow

logger = logging.getLogger(__name__)


def _token(actor_id: uuid.UUID, now: datetime) -> str:
    return jwt.encode(
        {"sub": str(actor_id), "iat": now, "exp": now + timedelta(days=7)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


async def seed() -> None:
    await create_schema()
    now = datetime.now(timezone.utc)

    alice = Actor(id=uuid.uuid4(), display_name="Alice", username="alice", avatar_url=None)
    bob = Actor(id=uuid.uuid4(), display_name="Bob", username="bob", avatar_url=None)
    members = frozenset({alice.id, bob.id})

    direct = Conversation(
        id=uuid.uuid4(),
        kind=ConversationKind.DIRECT,
        name=None,
        created_at=now,
        member_ids=members,
    )
    group = Conversation(
        id=uuid.uuid4(),
        kind=ConversationKind.GROUP,
        name="Garden club",
        created_at=now,
        member_ids=members,
        admin_ids=frozenset({alice.id}),
    )

    async with sqlalchemy_uow() as uow:
        await uow.actors_w.create(alice)
        await uow.actors_w.create(bob)
        await uow.conversations_w.create(direct)
        await uow.conversations_w.create(group)

        lines = [
            (alice, "Hi Bob!"),
            (bob, "Hey, how are the tomatoes?"),
            (alice, "Ripening slowly."),
        ]
        for offset, (sender, text) in enumerate(lines):
            ts = now + timedelta(seconds=offset)
            await uow.messages_w.create(
                Message(
                    id=uuid.uuid4(),
                    conversation_id=direct.id,
                    sender_id=sender.id,
                    text=text,
                    created_at=ts,
                    updated_at=ts,
                )
            )
        await uow.commit()

    logger.info("Seeded direct %s and group %s", direct.id, group.id)
    for actor in (alice, bob):
        print(f"{actor.username}: {actor.id}\n  token={_token(actor.id, now)}")


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
