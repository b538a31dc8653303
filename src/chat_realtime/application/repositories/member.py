from __future__ import annotations

from typing import Protocol
from uuid import UUID


class MemberReader(Protocol):
    async def is_member(self, conversation_id: UUID, actor_id: UUID) -> bool: ...
