from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID


class Recipient(Protocol):
    """A live connection that events can be pushed to."""

    id: str
    actor_id: UUID

    def send(self, event_type: str, data: dict[str, Any]) -> bool:
        """Queue an event without waiting on the network."""
        ...


class RoomDirectory(Protocol):
    async def members_of(self, conversation_id: UUID) -> list[Recipient]: ...
