"""Fan-out for transient signals: typing indicators and presence."""
from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from chat_realtime.application.dto.events import (
    OutboundEvent,
    presence_payload,
    typing_payload,
)
from chat_realtime.application.exceptions import ForbiddenError
from chat_realtime.infrastructure.ws.connection import Connection
from chat_realtime.infrastructure.ws.presence import PresenceRegistry
from chat_realtime.infrastructure.ws.rooms import RoomRouter

logger = logging.getLogger(__name__)


class EphemeralRelay:
    def __init__(self, presence: PresenceRegistry, rooms: RoomRouter) -> None:
        self._presence = presence
        self._rooms = rooms

    async def typing_start(self, connection: Connection, conversation_id: UUID) -> int:
        return await self._typing(OutboundEvent.TYPING_START, connection, conversation_id)

    async def typing_stop(self, connection: Connection, conversation_id: UUID) -> int:
        return await self._typing(OutboundEvent.TYPING_STOP, connection, conversation_id)

    async def _typing(
        self, event_type: str, connection: Connection, conversation_id: UUID
    ) -> int:
        if not await self._rooms.is_joined(connection, conversation_id):
            raise ForbiddenError("Join the conversation before sending typing events")
        data = typing_payload(conversation_id, connection.actor_id)
        # The typist's own devices do not get their own indicator
        targets = [
            c for c in await self._rooms.members_of(conversation_id)
            if c.actor_id != connection.actor_id
        ]
        return sum(1 for c in targets if c.send(event_type, data))

    async def presence_check(self, connection: Connection, target_actor_id: UUID) -> None:
        online = await self._presence.is_online(target_actor_id)
        last_seen = None if online else await self._presence.last_seen(target_actor_id)
        connection.send(
            OutboundEvent.PRESENCE_STATE,
            presence_payload(target_actor_id, online, last_seen),
        )

    async def announce_presence(
        self, actor_id: UUID, *, online: bool, last_seen: datetime | None
    ) -> None:
        data = presence_payload(actor_id, online, last_seen)
        targets = await self._presence.all_connections()
        for c in targets:
            c.send(OutboundEvent.USER_PRESENCE, data)
        logger.info(
            "Actor %s is %s (notified %d connections)",
            actor_id, "online" if online else "offline", len(targets),
        )

    async def send_online_snapshot(self, connection: Connection) -> None:
        actors = await self._presence.online_actors()
        connection.send(
            OutboundEvent.ONLINE_LIST,
            {"actorIds": sorted(str(a) for a in actors)},
        )
