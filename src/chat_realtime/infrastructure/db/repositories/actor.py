from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chat_realtime.application.exceptions import NotFoundError
from chat_realtime.domain.entities.actor import Actor
from chat_realtime.infrastructure.db.mappers import actor as mapper
from chat_realtime.infrastructure.db.models.actor import ActorModel


class ActorReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, actor_id: UUID) -> Actor | None:
        result = await self._session.get(ActorModel, actor_id)
        return mapper.model_to_entity(result) if result else None

    async def get_many(self, actor_ids: Iterable[UUID]) -> dict[UUID, Actor]:
        ids = list(actor_ids)
        if not ids:
            return {}
        result = await self._session.execute(
            select(ActorModel).where(ActorModel.id.in_(ids))
        )
        return {m.id: mapper.model_to_entity(m) for m in result.scalars().all()}


class ActorWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, actor: Actor) -> Actor:
        model = mapper.entity_to_model(actor)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def update_last_seen(self, actor_id: UUID, ts: datetime) -> None:
        """Move last-seen forward; an older timestamp leaves the row as is."""
        stmt = (
            update(ActorModel)
            .where(
                ActorModel.id == actor_id,
                or_(ActorModel.last_seen.is_(None), ActorModel.last_seen < ts),
            )
            .values(last_seen=ts)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            exists = await self._session.scalar(
                select(ActorModel.id).where(ActorModel.id == actor_id)
            )
            if exists is None:
                raise NotFoundError("Actor not found")
