from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import literal, select, tuple_, update
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from chat_realtime.domain.entities.message import Message
from chat_realtime.infrastructure.db.mappers import message as mapper
from chat_realtime.infrastructure.db.models.message import MessageModel, MessageReadModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, message_id: UUID) -> Message | None:
        result = await self._session.get(MessageModel, message_id)
        return mapper.model_to_entity(result) if result else None

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        before: UUID | None = None,
        limit: int = 50,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.conversation_id == conversation_id)
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
            .limit(limit)
        )
        if before is not None:
            pivot = await self._session.get(MessageModel, before)
            if pivot is None or pivot.conversation_id != conversation_id:
                return []
            stmt = stmt.where(
                tuple_(MessageModel.created_at, MessageModel.id)
                < tuple_(literal(pivot.created_at), literal(pivot.id, PG_UUID(as_uuid=True)))
            )
        result = await self._session.execute(stmt)
        newest_first = [mapper.model_to_entity(m) for m in result.scalars().all()]
        return list(reversed(newest_first))


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def update_text(self, message_id: UUID, text: str, ts: datetime) -> None:
        stmt = (
            update(MessageModel)
            .where(MessageModel.id == message_id, MessageModel.is_deleted.is_(False))
            .values(text=text, updated_at=ts)
        )
        await self._session.execute(stmt)

    async def soft_delete(self, message_id: UUID, placeholder: str, ts: datetime) -> None:
        stmt = (
            update(MessageModel)
            .where(MessageModel.id == message_id)
            .values(text=placeholder, is_deleted=True, updated_at=ts)
        )
        await self._session.execute(stmt)

    async def add_reader(self, conversation_id: UUID, actor_id: UUID) -> int:
        """Set-union the actor into readBy for the whole conversation in one statement."""
        already_read = select(MessageReadModel.message_id).where(
            MessageReadModel.actor_id == actor_id,
        )
        unread = select(
            MessageModel.id,
            literal(actor_id, PG_UUID(as_uuid=True)),
        ).where(
            MessageModel.conversation_id == conversation_id,
            MessageModel.id.not_in(already_read),
        )
        stmt = (
            pg_insert(MessageReadModel)
            .from_select(["message_id", "actor_id"], unread)
            .on_conflict_do_nothing(index_elements=["message_id", "actor_id"])
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0
