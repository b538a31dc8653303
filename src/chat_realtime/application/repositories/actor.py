from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol
from uuid import UUID

from chat_realtime.domain.entities.actor import Actor


class ActorReader(Protocol):
    async def get_by_id(self, actor_id: UUID) -> Actor | None: ...

    async def get_many(self, actor_ids: Iterable[UUID]) -> dict[UUID, Actor]: ...


class ActorWriter(Protocol):
    async def create(self, actor: Actor) -> Actor: ...

    async def update_last_seen(self, actor_id: UUID, ts: datetime) -> None:
        """Raise NotFoundError if the actor does not exist."""
        ...
