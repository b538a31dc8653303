"""Message lifecycle: validate, persist, then fan out to the conversation room.

Both the WebSocket handler and the REST routers call into this class, so
authorization and persistence follow one path regardless of entry point.

Writes for the same conversation are serialized, which makes every member
connection observe ``message:new`` events in commit order. Writes to
different conversations run independently.
"""
from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from chat_realtime.application.dto.events import (
    OutboundEvent,
    message_payload,
    read_payload,
)
from chat_realtime.application.dto.message import MessageView
from chat_realtime.application.locks import KeyedLock
from chat_realtime.application.ports.clock import Clock, SystemClock
from chat_realtime.application.ports.realtime import RoomDirectory
from chat_realtime.application.uow import UnitOfWorkFactory
from chat_realtime.services import message_service, read_state_service

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER = "This message was deleted"


class MessageLifecycleManager:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        rooms: RoomDirectory,
        *,
        clock: Clock | None = None,
        deleted_placeholder: str = DEFAULT_PLACEHOLDER,
        max_length: int = message_service.DEFAULT_MAX_LENGTH,
    ) -> None:
        self._uow_factory = uow_factory
        self._rooms = rooms
        self._clock = clock or SystemClock()
        self._placeholder = deleted_placeholder
        self._max_length = max_length
        self._conversation_locks = KeyedLock()

    async def create(self, actor_id: UUID, conversation_id: UUID, text: str) -> MessageView:
        text = message_service.clean_text(text, self._max_length)
        async with self._conversation_locks.hold(conversation_id):
            async with self._uow_factory() as uow:
                view = await message_service.create_message(
                    conversation_id, actor_id, text, uow, now=self._clock.now(),
                )
            await self._broadcast(conversation_id, OutboundEvent.MESSAGE_NEW, message_payload(view))
        logger.debug("Message %s created in %s by %s", view.message.id, conversation_id, actor_id)
        return view

    async def edit(self, actor_id: UUID, message_id: UUID, text: str) -> MessageView:
        text = message_service.clean_text(text, self._max_length)
        conversation_id = await self._conversation_of(message_id)
        async with self._conversation_locks.hold(conversation_id):
            async with self._uow_factory() as uow:
                view = await message_service.edit_message(
                    message_id, actor_id, text, uow, now=self._clock.now(),
                )
            await self._broadcast(conversation_id, OutboundEvent.MESSAGE_EDIT, message_payload(view))
        return view

    async def soft_delete(self, actor_id: UUID, message_id: UUID) -> MessageView:
        conversation_id = await self._conversation_of(message_id)
        async with self._conversation_locks.hold(conversation_id):
            async with self._uow_factory() as uow:
                view = await message_service.soft_delete_message(
                    message_id, actor_id, self._placeholder, uow, now=self._clock.now(),
                )
            await self._broadcast(conversation_id, OutboundEvent.MESSAGE_DELETE, message_payload(view))
        logger.info("Message %s soft-deleted by %s", message_id, actor_id)
        return view

    async def mark_conversation_read(self, actor_id: UUID, conversation_id: UUID) -> int:
        async with self._conversation_locks.hold(conversation_id):
            async with self._uow_factory() as uow:
                marked = await read_state_service.mark_conversation_read(
                    conversation_id, actor_id, uow,
                )
            # One constant-size event regardless of how many messages were marked
            await self._broadcast(
                conversation_id,
                OutboundEvent.CONVERSATION_READ,
                read_payload(conversation_id, actor_id),
            )
        return marked

    async def list_messages(
        self,
        actor_id: UUID,
        conversation_id: UUID,
        *,
        before: UUID | None = None,
        limit: int = 50,
    ) -> list[MessageView]:
        async with self._uow_factory() as uow:
            return await message_service.list_messages(
                conversation_id, actor_id, before, limit, uow,
            )

    async def _conversation_of(self, message_id: UUID) -> UUID:
        async with self._uow_factory() as uow:
            return await message_service.get_conversation_id(message_id, uow)

    async def _broadcast(
        self,
        conversation_id: UUID,
        event_type: str,
        data: dict[str, Any],
    ) -> None:
        recipients = await self._rooms.members_of(conversation_id)
        delivered = sum(1 for r in recipients if r.send(event_type, data))
        logger.debug(
            "Broadcast %s to %s: %d/%d queued",
            event_type, conversation_id, delivered, len(recipients),
        )
