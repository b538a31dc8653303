from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from chat_realtime.domain.value_objects.enums import ConversationKind


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    kind: str
    name: str | None
    created_at: datetime
    last_activity_at: datetime | None = None
    member_ids: frozenset[UUID] = field(default_factory=frozenset)
    admin_ids: frozenset[UUID] = field(default_factory=frozenset)

    def check_invariants(self) -> None:
        """Raise ValueError if membership does not fit the conversation kind."""
        if self.kind == ConversationKind.DIRECT:
            if len(self.member_ids) != 2:
                raise ValueError("Direct conversation must have exactly two members")
            if self.admin_ids:
                raise ValueError("Direct conversation cannot have admins")
        elif self.kind == ConversationKind.GROUP:
            if not self.admin_ids:
                raise ValueError("Group conversation needs at least one admin")
            if not self.admin_ids <= self.member_ids:
                raise ValueError("Every group admin must be a member")
        else:
            raise ValueError(f"Unknown conversation kind: {self.kind}")
