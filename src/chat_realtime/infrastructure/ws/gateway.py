"""Per-connection lifecycle: admit, register presence, tear down."""
from __future__ import annotations

import logging
from uuid import UUID

from chat_realtime.application.dto.principal import Principal
from chat_realtime.application.exceptions import UnauthenticatedError
from chat_realtime.application.locks import KeyedLock
from chat_realtime.application.policies.permissions import assert_conversation_access
from chat_realtime.application.ports.auth import TokenVerifier
from chat_realtime.application.ports.clock import Clock, SystemClock
from chat_realtime.application.uow import UnitOfWorkFactory
from chat_realtime.infrastructure.ws.connection import Connection, Transport
from chat_realtime.infrastructure.ws.presence import PresenceRegistry
from chat_realtime.infrastructure.ws.relay import EphemeralRelay
from chat_realtime.infrastructure.ws.rooms import RoomRouter

logger = logging.getLogger(__name__)


class ConnectionGateway:
    def __init__(
        self,
        verifier: TokenVerifier,
        presence: PresenceRegistry,
        rooms: RoomRouter,
        relay: EphemeralRelay,
        uow_factory: UnitOfWorkFactory,
        *,
        clock: Clock | None = None,
        queue_size: int = 256,
    ) -> None:
        self._verifier = verifier
        self._presence = presence
        self._rooms = rooms
        self._relay = relay
        self._uow_factory = uow_factory
        self._clock = clock or SystemClock()
        self._queue_size = queue_size
        # Serializes online/offline transitions of the same actor
        self._actor_locks = KeyedLock()

    async def authenticate(self, credential: str | None) -> Principal:
        if not credential:
            raise UnauthenticatedError("Missing credential")
        try:
            return await self._verifier.verify(credential)
        except UnauthenticatedError:
            raise
        except Exception as exc:
            logger.debug("Credential verification failed", exc_info=True)
            raise UnauthenticatedError("Invalid credential") from exc

    async def connect(self, transport: Transport, credential: str | None) -> Connection:
        """Verify, accept and register a connection.

        Raises UnauthenticatedError before anything is registered.
        """
        principal = await self.authenticate(credential)
        await transport.accept()

        connection = Connection(transport, principal.actor_id, queue_size=self._queue_size)
        connection.start()

        async with self._actor_locks.hold(connection.actor_id):
            first = await self._presence.register(connection)
            await self._relay.send_online_snapshot(connection)
            if first:
                await self._relay.announce_presence(
                    connection.actor_id, online=True, last_seen=None,
                )
        logger.info("Connection %s opened for actor %s", connection.id, connection.actor_id)
        return connection

    async def join(self, connection: Connection, conversation_id: UUID) -> None:
        async with self._uow_factory() as uow:
            conversation = await uow.conversations.get_by_id(conversation_id)
            await assert_conversation_access(connection.actor_id, conversation, uow.members)
        await self._rooms.join(connection, conversation_id)

    async def leave(self, connection: Connection, conversation_id: UUID) -> None:
        await self._rooms.leave(connection, conversation_id)

    async def disconnect(self, connection: Connection) -> None:
        """Tear down a connection; the actor goes offline with its last one.

        The offline transition is tied to the registration stamp read together
        with the last unregister. If the actor registered again before the
        broadcast, the stamp no longer matches and this teardown stays silent.
        A failed last-seen write is logged and does not stop the teardown.
        """
        actor_id = connection.actor_id
        await self._rooms.leave_all(connection)
        await connection.close()

        async with self._actor_locks.hold(actor_id):
            was_last = await self._presence.unregister(connection)
            generation = await self._presence.generation(actor_id) if was_last else None
        logger.info("Connection %s closed for actor %s (last=%s)", connection.id, actor_id, was_last)
        if not was_last:
            return

        last_seen = self._clock.now()
        if await self._presence.generation(actor_id) == generation:
            try:
                async with self._uow_factory() as uow:
                    await uow.actors_w.update_last_seen(actor_id, last_seen)
                    await uow.commit()
            except Exception:
                logger.exception("Failed to persist last-seen for actor %s", actor_id)

        async with self._actor_locks.hold(actor_id):
            if not await self._presence.release(actor_id, generation):
                logger.debug("Actor %s reconnected, skipping offline broadcast", actor_id)
                return
            await self._relay.announce_presence(actor_id, online=False, last_seen=last_seen)
