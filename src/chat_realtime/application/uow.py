from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol

from chat_realtime.application.repositories.actor import ActorReader, ActorWriter
from chat_realtime.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
)
from chat_realtime.application.repositories.member import MemberReader
from chat_realtime.application.repositories.message import MessageReader, MessageWriter


class UnitOfWork(Protocol):
    actors: ActorReader
    actors_w: ActorWriter
    conversations: ConversationReader
    conversations_w: ConversationWriter
    members: MemberReader
    messages: MessageReader
    messages_w: MessageWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


# Each call opens a fresh unit; storage failures leave it as StorageError.
UnitOfWorkFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
