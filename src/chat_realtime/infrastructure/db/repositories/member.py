from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_realtime.infrastructure.db.models.member import ConversationMemberModel


class MemberReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def is_member(self, conversation_id: UUID, actor_id: UUID) -> bool:
        stmt = (
            select(ConversationMemberModel.actor_id)
            .where(
                ConversationMemberModel.conversation_id == conversation_id,
                ConversationMemberModel.actor_id == actor_id,
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None
