"""Real-time event names and payload shapes (camelCase on the wire)."""
from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from chat_realtime.application.dto.message import MessageView


class InboundEvent(StrEnum):
    CONVERSATION_JOIN = "conversation:join"
    CONVERSATION_LEAVE = "conversation:leave"
    CONVERSATION_READ = "conversation:read"
    TYPING_START = "typing:start"
    TYPING_STOP = "typing:stop"
    PRESENCE_CHECK = "presence:check"
    MESSAGE_NEW = "message:new"
    MESSAGE_EDIT = "message:edit"
    MESSAGE_DELETE = "message:delete"
    PING = "ping"


class OutboundEvent(StrEnum):
    ONLINE_LIST = "user:online:list"
    USER_PRESENCE = "user:presence"
    PRESENCE_STATE = "presence:state"
    TYPING_START = "typing:start"
    TYPING_STOP = "typing:stop"
    MESSAGE_NEW = "message:new"
    MESSAGE_EDIT = "message:edit"
    MESSAGE_DELETE = "message:delete"
    CONVERSATION_READ = "conversation:read"
    CONVERSATION_JOINED = "conversation:joined"
    CONVERSATION_LEFT = "conversation:left"
    PONG = "pong"
    ERROR = "error"


def _iso(ts: datetime | None) -> str | None:
    return ts.isoformat() if ts is not None else None


def message_payload(view: MessageView) -> dict[str, Any]:
    msg = view.message
    return {
        "id": str(msg.id),
        "conversationId": str(msg.conversation_id),
        "sender": {
            "id": str(view.sender.id),
            "displayName": view.sender.display_name,
            "username": view.sender.username,
            "avatarUrl": view.sender.avatar_url,
        },
        "text": msg.text,
        "isDeleted": msg.is_deleted,
        "readBy": sorted(str(a) for a in msg.read_by),
        "createdAt": _iso(msg.created_at),
        "updatedAt": _iso(msg.updated_at),
    }


def presence_payload(
    actor_id: UUID, online: bool, last_seen: datetime | None
) -> dict[str, Any]:
    return {
        "actorId": str(actor_id),
        "online": online,
        "lastSeen": _iso(last_seen),
    }


def read_payload(conversation_id: UUID, actor_id: UUID) -> dict[str, Any]:
    return {"conversationId": str(conversation_id), "actorId": str(actor_id)}


def typing_payload(conversation_id: UUID, actor_id: UUID) -> dict[str, Any]:
    return {"conversationId": str(conversation_id), "actorId": str(actor_id)}
