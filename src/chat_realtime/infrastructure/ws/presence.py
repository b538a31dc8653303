"""Process-local presence: which actors have at least one open connection.

The raw table is never exposed. Every mutation and read goes through the
registry lock so register/unregister are atomic with respect to each other.
"""
from __future__ import annotations

import asyncio
import itertools
import logging
from datetime import datetime
from uuid import UUID

from chat_realtime.application.exceptions import NotFoundError
from chat_realtime.application.uow import UnitOfWorkFactory
from chat_realtime.infrastructure.ws.connection import Connection

logger = logging.getLogger(__name__)


class PresenceRegistry:
    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory
        self._connections: dict[UUID, set[Connection]] = {}
        # Stamp of the latest register per actor, kept until the offline
        # transition for that stamp has been announced
        self._generations: dict[UUID, int] = {}
        self._stamps = itertools.count(1)
        self._lock = asyncio.Lock()

    async def register(self, connection: Connection) -> bool:
        """Add a connection. Returns True if it is the actor's first one."""
        async with self._lock:
            conns = self._connections.setdefault(connection.actor_id, set())
            first = not conns
            conns.add(connection)
            self._generations[connection.actor_id] = next(self._stamps)
        logger.debug(
            "Registered %r (first=%s, online=%d)", connection, first, len(self._connections),
        )
        return first

    async def unregister(self, connection: Connection) -> bool:
        """Remove a connection. Returns True if it was the actor's last one.

        Unknown connections are ignored and never count as a last connection.
        """
        async with self._lock:
            conns = self._connections.get(connection.actor_id)
            if not conns or connection not in conns:
                return False
            conns.discard(connection)
            if conns:
                return False
            del self._connections[connection.actor_id]
        logger.debug("Actor %s has no connections left", connection.actor_id)
        return True

    async def generation(self, actor_id: UUID) -> int | None:
        async with self._lock:
            return self._generations.get(actor_id)

    async def release(self, actor_id: UUID, generation: int | None) -> bool:
        """Claim the offline transition for an actor.

        True only if the actor is still offline and nothing registered since
        ``generation`` was read; the stamp is dropped so it is claimed once.
        """
        async with self._lock:
            if actor_id in self._connections:
                return False
            if generation is None or self._generations.get(actor_id) != generation:
                return False
            del self._generations[actor_id]
            return True

    async def is_online(self, actor_id: UUID) -> bool:
        async with self._lock:
            return actor_id in self._connections

    async def online_actors(self) -> set[UUID]:
        async with self._lock:
            return set(self._connections)

    async def connections_of(self, actor_id: UUID) -> list[Connection]:
        async with self._lock:
            return list(self._connections.get(actor_id, ()))

    async def all_connections(self) -> list[Connection]:
        async with self._lock:
            return [c for conns in self._connections.values() for c in conns]

    async def last_seen(self, actor_id: UUID) -> datetime | None:
        """None while online; otherwise the persisted last-seen time."""
        if await self.is_online(actor_id):
            return None
        async with self._uow_factory() as uow:
            actor = await uow.actors.get_by_id(actor_id)
        if actor is None:
            raise NotFoundError("Actor not found")
        return actor.last_seen
