from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from chat_realtime.domain.entities.message import Message


class MessageReader(Protocol):
    async def get_by_id(self, message_id: UUID) -> Message | None: ...

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        before: UUID | None = None,
        limit: int = 50,
    ) -> list[Message]:
        """Newest ``limit`` messages older than ``before``, returned oldest first."""
        ...


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message:
        """Insert the message together with its initial readers."""
        ...

    async def update_text(
        self, message_id: UUID, text: str, ts: datetime
    ) -> None: ...

    async def soft_delete(
        self, message_id: UUID, placeholder: str, ts: datetime
    ) -> None: ...

    async def add_reader(self, conversation_id: UUID, actor_id: UUID) -> int:
        """Add actor to readBy of every message lacking it. Returns rows touched."""
        ...
