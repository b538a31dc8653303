from __future__ import annotations

import uuid

from chat_realtime.application.policies.permissions import assert_conversation_access
from chat_realtime.application.uow import UnitOfWork


async def mark_conversation_read(
    conversation_id: uuid.UUID,
    actor_id: uuid.UUID,
    uow: UnitOfWork,
) -> int:
    """Add the actor to readBy of every message in the conversation.

    Idempotent: messages already read by the actor are left alone.
    Returns the number of messages that gained the actor.
    """
    conversation = await uow.conversations.get_by_id(conversation_id)
    await assert_conversation_access(actor_id, conversation, uow.members)
    marked = await uow.messages_w.add_reader(conversation_id, actor_id)
    await uow.commit()
    return marked
