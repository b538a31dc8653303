from __future__ import annotations

from chat_realtime.domain.entities.conversation import Conversation
from chat_realtime.infrastructure.db.models.conversation import ConversationModel
from chat_realtime.infrastructure.db.models.member import ConversationMemberModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.id,
        kind=model.kind,
        name=model.name,
        created_at=model.created_at,
        last_activity_at=model.last_activity_at,
        member_ids=frozenset(m.actor_id for m in model.members),
        admin_ids=frozenset(m.actor_id for m in model.members if m.is_admin),
    )


def entity_to_model(entity: Conversation) -> ConversationModel:
    return ConversationModel(
        id=entity.id,
        kind=entity.kind,
        name=entity.name,
        created_at=entity.created_at,
        last_activity_at=entity.last_activity_at,
        members=[
            ConversationMemberModel(
                actor_id=actor_id,
                is_admin=actor_id in entity.admin_ids,
            )
            for actor_id in entity.member_ids
        ],
    )
