from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    text: str
    created_at: datetime
    updated_at: datetime
    is_deleted: bool = False
    read_by: frozenset[UUID] = field(default_factory=frozenset)

    def with_text(self, text: str, at: datetime) -> Message:
        return replace(self, text=text, updated_at=at)

    def soft_deleted(self, placeholder: str, at: datetime) -> Message:
        return replace(self, text=placeholder, is_deleted=True, updated_at=at)

    def read_by_actor(self, actor_id: UUID) -> Message:
        # readBy only ever grows
        return replace(self, read_by=self.read_by | {actor_id})
