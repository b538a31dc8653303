from __future__ import annotations

from chat_realtime.domain.entities.actor import Actor
from chat_realtime.infrastructure.db.models.actor import ActorModel


def model_to_entity(model: ActorModel) -> Actor:
    return Actor(
        id=model.id,
        display_name=model.display_name,
        username=model.username,
        avatar_url=model.avatar_url,
        last_seen=model.last_seen,
    )


def entity_to_model(entity: Actor) -> ActorModel:
    return ActorModel(
        id=entity.id,
        display_name=entity.display_name,
        username=entity.username,
        avatar_url=entity.avatar_url,
        last_seen=entity.last_seen,
    )
