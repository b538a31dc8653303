from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Self

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chat_realtime.application.exceptions import StorageError
from chat_realtime.infrastructure.db.repositories.actor import ActorReaderRepo, ActorWriterRepo
from chat_realtime.infrastructure.db.repositories.conversation import (
    ConversationReaderRepo,
    ConversationWriterRepo,
)
from chat_realtime.infrastructure.db.repositories.member import MemberReaderRepo
from chat_realtime.infrastructure.db.repositories.message import (
    MessageReaderRepo,
    MessageWriterRepo,
)
from chat_realtime.infrastructure.db.session import AsyncSessionLocal

logger = logging.getLogger(__name__)

# Driver-level failures (refused connection, pool timeout) can surface unwrapped
_STORAGE_ERRORS = (SQLAlchemyError, OSError, TimeoutError)


class SqlAlchemyUoW:
    """Concrete Unit-of-Work backed by a single AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.actors = ActorReaderRepo(session)
        self.actors_w = ActorWriterRepo(session)
        self.conversations = ConversationReaderRepo(session)
        self.conversations_w = ConversationWriterRepo(session)
        self.members = MemberReaderRepo(session)
        self.messages = MessageReaderRepo(session)
        self.messages_w = MessageWriterRepo(session)

    async def flush(self) -> None:
        await self._session.flush()

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            return
        try:
            await self.rollback()
        except _STORAGE_ERRORS:
            logger.warning("Rollback failed", exc_info=True)
        if isinstance(exc_val, _STORAGE_ERRORS):
            raise StorageError("Storage operation failed") from exc_val


@asynccontextmanager
async def sqlalchemy_uow() -> AsyncIterator[SqlAlchemyUoW]:
    """UnitOfWorkFactory for the PostgreSQL store."""
    async with AsyncSessionLocal() as session:
        async with SqlAlchemyUoW(session) as uow:
            yield uow
