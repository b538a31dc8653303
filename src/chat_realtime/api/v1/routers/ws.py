from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import pydantic
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from chat_realtime.api.middleware.correlation_id import bind_correlation_id, correlation_id_ctx
from chat_realtime.application.dto.events import InboundEvent, OutboundEvent
from chat_realtime.application.exceptions import AppError, UnauthenticatedError
from chat_realtime.container import Container
from chat_realtime.infrastructure.ws.connection import Connection
from chat_realtime.infrastructure.ws.protocol import (
    ConversationRef,
    EditMessage,
    MessageRef,
    NewMessage,
    PresenceCheck,
    WsInbound,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

# Close code for a rejected credential
AUTH_FAILED = 4001

Handler = Callable[[Container, Connection, dict[str, Any]], Awaitable[None]]


def _bearer(websocket: WebSocket) -> str | None:
    header = websocket.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value:
        return value.strip()
    return None


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    token: str | None = Query(None),
) -> None:
    container: Container = websocket.app.state.container
    try:
        connection = await container.gateway.connect(websocket, token or _bearer(websocket))
    except UnauthenticatedError as exc:
        logger.info("WS rejected: %s", exc.detail)
        await websocket.close(code=AUTH_FAILED, reason="Authentication failed")
        return

    cid_token = bind_correlation_id(connection.id)
    heartbeat_task = asyncio.create_task(
        _heartbeat(connection, container.heartbeat_seconds),
        name=f"ws-heartbeat-{connection.id}",
    )
    try:
        await _read_loop(websocket, container, connection)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", connection.id)
    finally:
        heartbeat_task.cancel()
        await container.gateway.disconnect(connection)
        correlation_id_ctx.reset(cid_token)


async def _heartbeat(connection: Connection, interval: int) -> None:
    while not connection.closed:
        await asyncio.sleep(interval)
        connection.send(OutboundEvent.PONG, {})


async def _read_loop(ws: WebSocket, container: Container, connection: Connection) -> None:
    while not connection.closed:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except pydantic.ValidationError:
            _error(connection, "invalid_payload", "Malformed envelope", None)
            continue

        handler = _HANDLERS.get(msg.type)
        if handler is None:
            _error(connection, "unknown_type", f"Unknown event type {msg.type!r}", msg.type)
            continue

        try:
            await handler(container, connection, msg.data)
        except pydantic.ValidationError as exc:
            _error(connection, "invalid_payload", str(exc.errors()[0]["msg"]), msg.type)
        except AppError as exc:
            logger.debug("%s rejected for %s: %s", msg.type, connection.id, exc.detail)
            _error(connection, exc.code, exc.detail, msg.type)
        except Exception:
            logger.exception("%s failed for %s", msg.type, connection.id)
            _error(connection, "internal_error", "Internal error", msg.type)


def _error(connection: Connection, code: str, detail: str, request_type: str | None) -> None:
    connection.send(
        OutboundEvent.ERROR,
        {"code": code, "detail": detail, "requestType": request_type},
    )


async def _on_join(container: Container, conn: Connection, data: dict[str, Any]) -> None:
    ref = ConversationRef.model_validate(data)
    await container.gateway.join(conn, ref.conversation_id)
    conn.send(OutboundEvent.CONVERSATION_JOINED, {"conversationId": str(ref.conversation_id)})


async def _on_leave(container: Container, conn: Connection, data: dict[str, Any]) -> None:
    ref = ConversationRef.model_validate(data)
    await container.gateway.leave(conn, ref.conversation_id)
    conn.send(OutboundEvent.CONVERSATION_LEFT, {"conversationId": str(ref.conversation_id)})


async def _on_read(container: Container, conn: Connection, data: dict[str, Any]) -> None:
    ref = ConversationRef.model_validate(data)
    await container.lifecycle.mark_conversation_read(conn.actor_id, ref.conversation_id)


async def _on_typing_start(container: Container, conn: Connection, data: dict[str, Any]) -> None:
    ref = ConversationRef.model_validate(data)
    await container.relay.typing_start(conn, ref.conversation_id)


async def _on_typing_stop(container: Container, conn: Connection, data: dict[str, Any]) -> None:
    ref = ConversationRef.model_validate(data)
    await container.relay.typing_stop(conn, ref.conversation_id)


async def _on_presence_check(container: Container, conn: Connection, data: dict[str, Any]) -> None:
    req = PresenceCheck.model_validate(data)
    await container.relay.presence_check(conn, req.target_actor_id)


async def _on_message_new(container: Container, conn: Connection, data: dict[str, Any]) -> None:
    req = NewMessage.model_validate(data)
    await container.lifecycle.create(conn.actor_id, req.conversation_id, req.text)


async def _on_message_edit(container: Container, conn: Connection, data: dict[str, Any]) -> None:
    req = EditMessage.model_validate(data)
    await container.lifecycle.edit(conn.actor_id, req.message_id, req.text)


async def _on_message_delete(container: Container, conn: Connection, data: dict[str, Any]) -> None:
    req = MessageRef.model_validate(data)
    await container.lifecycle.soft_delete(conn.actor_id, req.message_id)


async def _on_ping(container: Container, conn: Connection, data: dict[str, Any]) -> None:
    conn.send(OutboundEvent.PONG, {})


_HANDLERS: dict[str, Handler] = {
    InboundEvent.CONVERSATION_JOIN: _on_join,
    InboundEvent.CONVERSATION_LEAVE: _on_leave,
    InboundEvent.CONVERSATION_READ: _on_read,
    InboundEvent.TYPING_START: _on_typing_start,
    InboundEvent.TYPING_STOP: _on_typing_stop,
    InboundEvent.PRESENCE_CHECK: _on_presence_check,
    InboundEvent.MESSAGE_NEW: _on_message_new,
    InboundEvent.MESSAGE_EDIT: _on_message_edit,
    InboundEvent.MESSAGE_DELETE: _on_message_delete,
    InboundEvent.PING: _on_ping,
}
