from __future__ import annotations

from dataclasses import dataclass

from chat_realtime.domain.entities.actor import ActorSummary
from chat_realtime.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class MessageView:
    """A persisted message with its sender resolved for display."""

    message: Message
    sender: ActorSummary
