from __future__ import annotations

from datetime import datetime
from uuid import UUID

from chat_realtime.api.v1.schemas.common import CamelModel
from chat_realtime.application.dto.events import message_payload
from chat_realtime.application.dto.message import MessageView


class SendMessageRequest(CamelModel):
    text: str


class EditMessageRequest(CamelModel):
    text: str


class SenderResponse(CamelModel):
    id: UUID
    display_name: str | None = None
    username: str | None = None
    avatar_url: str | None = None


class MessageResponse(CamelModel):
    id: UUID
    conversation_id: UUID
    sender: SenderResponse
    text: str
    is_deleted: bool
    read_by: list[UUID]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_view(cls, view: MessageView) -> MessageResponse:
        # Same shape the socket broadcasts
        return cls.model_validate(message_payload(view))


class MarkReadResponse(CamelModel):
    ok: bool = True
    marked: int
