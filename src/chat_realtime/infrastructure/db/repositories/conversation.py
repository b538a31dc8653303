from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from chat_realtime.domain.entities.conversation import Conversation
from chat_realtime.infrastructure.db.mappers import conversation as mapper
from chat_realtime.infrastructure.db.models.conversation import ConversationModel


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        result = await self._session.get(ConversationModel, conversation_id)
        return mapper.model_to_entity(result) if result else None


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, conversation: Conversation) -> Conversation:
        conversation.check_invariants()
        model = mapper.entity_to_model(conversation)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def touch_last_activity(self, conversation_id: UUID, ts: datetime) -> None:
        """Move lastActivityAt forward; an older timestamp is ignored."""
        stmt = (
            update(ConversationModel)
            .where(
                ConversationModel.id == conversation_id,
                or_(
                    ConversationModel.last_activity_at.is_(None),
                    ConversationModel.last_activity_at < ts,
                ),
            )
            .values(last_activity_at=ts)
        )
        await self._session.execute(stmt)
