from __future__ import annotations

from uuid import UUID

from chat_realtime.application.exceptions import ForbiddenError, NotFoundError
from chat_realtime.application.repositories.member import MemberReader
from chat_realtime.domain.entities.conversation import Conversation
from chat_realtime.domain.entities.message import Message


async def assert_conversation_access(
    actor_id: UUID,
    conversation: Conversation | None,
    members: MemberReader,
) -> Conversation:
    """Raise if conversation doesn't exist or actor is not a member."""
    if conversation is None:
        raise NotFoundError("Conversation not found")

    is_member = await members.is_member(conversation.id, actor_id)
    if not is_member:
        raise ForbiddenError("Not a member of this conversation")

    return conversation


async def assert_message_author(
    actor_id: UUID,
    message: Message | None,
    members: MemberReader,
) -> Message:
    """Only the sender, while still a member, may modify a message."""
    if message is None:
        raise NotFoundError("Message not found")

    if message.sender_id != actor_id:
        raise ForbiddenError("Only the sender can modify this message")

    # Membership can be revoked after the message was sent
    if not await members.is_member(message.conversation_id, actor_id):
        raise ForbiddenError("Not a member of this conversation")

    return message
