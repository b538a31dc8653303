from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Actor:
    id: UUID
    display_name: str | None
    username: str | None
    avatar_url: str | None
    last_seen: datetime | None = None


@dataclass(frozen=True, slots=True)
class ActorSummary:
    """Display attributes denormalized onto outgoing messages."""

    id: UUID
    display_name: str | None = None
    username: str | None = None
    avatar_url: str | None = None

    @classmethod
    def of(cls, actor: Actor) -> ActorSummary:
        return cls(
            id=actor.id,
            display_name=actor.display_name,
            username=actor.username,
            avatar_url=actor.avatar_url,
        )
