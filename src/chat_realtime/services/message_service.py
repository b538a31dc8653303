from __future__ import annotations

import uuid
from datetime import datetime

from chat_realtime.application.dto.message import MessageView
from chat_realtime.application.exceptions import ConflictError, NotFoundError, ValidationError
from chat_realtime.application.policies.permissions import (
    assert_conversation_access,
    assert_message_author,
)
from chat_realtime.application.uow import UnitOfWork
from chat_realtime.domain.entities.actor import Actor, ActorSummary
from chat_realtime.domain.entities.message import Message

DEFAULT_MAX_LENGTH = 4000


def clean_text(text: str | None, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    if text is None or not text.strip():
        raise ValidationError("Message text is required")
    if len(text) > max_length:
        raise ValidationError(f"Message text exceeds {max_length} characters")
    return text


async def create_message(
    conversation_id: uuid.UUID,
    actor_id: uuid.UUID,
    text: str,
    uow: UnitOfWork,
    *,
    now: datetime,
) -> MessageView:
    """Persist a new message; the sender has implicitly read it."""
    conversation = await uow.conversations.get_by_id(conversation_id)
    await assert_conversation_access(actor_id, conversation, uow.members)

    msg = Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=actor_id,
        text=text,
        created_at=now,
        updated_at=now,
        read_by=frozenset({actor_id}),
    )
    msg = await uow.messages_w.create(msg)
    await uow.conversations_w.touch_last_activity(conversation_id, msg.created_at)
    await uow.commit()
    return await _view(msg, uow)


async def edit_message(
    message_id: uuid.UUID,
    actor_id: uuid.UUID,
    text: str,
    uow: UnitOfWork,
    *,
    now: datetime,
) -> MessageView:
    msg = await uow.messages.get_by_id(message_id)
    msg = await assert_message_author(actor_id, msg, uow.members)
    if msg.is_deleted:
        raise ConflictError("Deleted messages cannot be edited")

    await uow.messages_w.update_text(message_id, text, now)
    await uow.commit()
    return await _view(msg.with_text(text, now), uow)


async def soft_delete_message(
    message_id: uuid.UUID,
    actor_id: uuid.UUID,
    placeholder: str,
    uow: UnitOfWork,
    *,
    now: datetime,
) -> MessageView:
    msg = await uow.messages.get_by_id(message_id)
    msg = await assert_message_author(actor_id, msg, uow.members)
    if msg.is_deleted:
        raise ConflictError("Message is already deleted")

    await uow.messages_w.soft_delete(message_id, placeholder, now)
    await uow.commit()
    return await _view(msg.soft_deleted(placeholder, now), uow)


async def get_conversation_id(message_id: uuid.UUID, uow: UnitOfWork) -> uuid.UUID:
    msg = await uow.messages.get_by_id(message_id)
    if msg is None:
        raise NotFoundError("Message not found")
    return msg.conversation_id


async def list_messages(
    conversation_id: uuid.UUID,
    actor_id: uuid.UUID,
    before: uuid.UUID | None,
    limit: int,
    uow: UnitOfWork,
) -> list[MessageView]:
    conversation = await uow.conversations.get_by_id(conversation_id)
    await assert_conversation_access(actor_id, conversation, uow.members)
    messages = await uow.messages.list_messages(
        conversation_id, before=before, limit=limit,
    )
    senders = await uow.actors.get_many({m.sender_id for m in messages})
    return [
        MessageView(message=m, sender=_summary(m.sender_id, senders.get(m.sender_id)))
        for m in messages
    ]


async def _view(msg: Message, uow: UnitOfWork) -> MessageView:
    sender = await uow.actors.get_by_id(msg.sender_id)
    return MessageView(message=msg, sender=_summary(msg.sender_id, sender))


def _summary(actor_id: uuid.UUID, actor: Actor | None) -> ActorSummary:
    return ActorSummary.of(actor) if actor is not None else ActorSummary(id=actor_id)
