"""WebSocket message envelope models."""
from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # conversation:join | message:new | typing:start | presence:check | ...
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # message:new | user:presence | conversation:read | error | pong | ...
    data: dict[str, Any] = {}


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConversationRef(_Payload):
    conversation_id: UUID


class PresenceCheck(_Payload):
    target_actor_id: UUID


class NewMessage(_Payload):
    conversation_id: UUID
    text: str


class EditMessage(_Payload):
    message_id: UUID
    text: str


class MessageRef(_Payload):
    message_id: UUID
