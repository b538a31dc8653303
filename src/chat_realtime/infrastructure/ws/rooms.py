"""Routing table from conversation id to the live connections joined to it.

The router does not check membership; callers validate before joining.
"""
from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from chat_realtime.infrastructure.ws.connection import Connection

logger = logging.getLogger(__name__)


class RoomRouter:
    def __init__(self) -> None:
        self._rooms: dict[UUID, set[Connection]] = {}
        self._joined: dict[str, set[UUID]] = {}
        self._lock = asyncio.Lock()

    async def join(self, connection: Connection, conversation_id: UUID) -> None:
        async with self._lock:
            self._rooms.setdefault(conversation_id, set()).add(connection)
            self._joined.setdefault(connection.id, set()).add(conversation_id)

    async def leave(self, connection: Connection, conversation_id: UUID) -> None:
        async with self._lock:
            self._remove(connection, conversation_id)

    async def leave_all(self, connection: Connection) -> set[UUID]:
        """Drop the connection from every room it joined."""
        async with self._lock:
            rooms = set(self._joined.get(connection.id, ()))
            for conversation_id in rooms:
                self._remove(connection, conversation_id)
        if rooms:
            logger.debug("%r left %d rooms", connection, len(rooms))
        return rooms

    async def members_of(self, conversation_id: UUID) -> list[Connection]:
        async with self._lock:
            return list(self._rooms.get(conversation_id, ()))

    async def is_joined(self, connection: Connection, conversation_id: UUID) -> bool:
        async with self._lock:
            return conversation_id in self._joined.get(connection.id, ())

    async def rooms_of(self, connection: Connection) -> set[UUID]:
        async with self._lock:
            return set(self._joined.get(connection.id, ()))

    def _remove(self, connection: Connection, conversation_id: UUID) -> None:
        members = self._rooms.get(conversation_id)
        if members is not None:
            members.discard(connection)
            if not members:
                del self._rooms[conversation_id]
        joined = self._joined.get(connection.id)
        if joined is not None:
            joined.discard(conversation_id)
            if not joined:
                del self._joined[connection.id]

    def stats(self) -> tuple[int, int]:
        """(rooms, connections with at least one room)."""
        return len(self._rooms), len(self._joined)
