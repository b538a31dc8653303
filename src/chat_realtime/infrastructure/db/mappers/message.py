from __future__ import annotations

from chat_realtime.domain.entities.message import Message
from chat_realtime.infrastructure.db.models.message import MessageModel, MessageReadModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        text=model.text,
        created_at=model.created_at,
        updated_at=model.updated_at,
        is_deleted=model.is_deleted,
        read_by=frozenset(r.actor_id for r in model.reads),
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        conversation_id=entity.conversation_id,
        sender_id=entity.sender_id,
        text=entity.text,
        is_deleted=entity.is_deleted,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
        reads=[MessageReadModel(actor_id=actor_id) for actor_id in entity.read_by],
    )
