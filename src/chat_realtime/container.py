"""Process-wide wiring of the real-time components."""
from __future__ import annotations

from dataclasses import dataclass

from chat_realtime.application.ports.auth import TokenVerifier
from chat_realtime.application.ports.clock import Clock, SystemClock
from chat_realtime.application.uow import UnitOfWorkFactory
from chat_realtime.config import Settings
from chat_realtime.infrastructure.auth.hs256_verifier import HS256Verifier
from chat_realtime.infrastructure.auth.jwks_verifier import JWKSVerifier
from chat_realtime.infrastructure.ws.gateway import ConnectionGateway
from chat_realtime.infrastructure.ws.presence import PresenceRegistry
from chat_realtime.infrastructure.ws.relay import EphemeralRelay
from chat_realtime.infrastructure.ws.rooms import RoomRouter
from chat_realtime.services.lifecycle import MessageLifecycleManager


@dataclass
class Container:
    verifier: TokenVerifier
    presence: PresenceRegistry
    rooms: RoomRouter
    relay: EphemeralRelay
    lifecycle: MessageLifecycleManager
    gateway: ConnectionGateway
    heartbeat_seconds: int
    history_limit: int


def build_verifier(settings: Settings) -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        assert settings.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)


def build_container(
    settings: Settings,
    uow_factory: UnitOfWorkFactory,
    *,
    verifier: TokenVerifier | None = None,
    clock: Clock | None = None,
) -> Container:
    verifier = verifier or build_verifier(settings)
    clock = clock or SystemClock()

    presence = PresenceRegistry(uow_factory)
    rooms = RoomRouter()
    relay = EphemeralRelay(presence, rooms)
    lifecycle = MessageLifecycleManager(
        uow_factory,
        rooms,
        clock=clock,
        deleted_placeholder=settings.DELETED_MESSAGE_PLACEHOLDER,
        max_length=settings.MESSAGE_MAX_LENGTH,
    )
    gateway = ConnectionGateway(
        verifier,
        presence,
        rooms,
        relay,
        uow_factory,
        clock=clock,
        queue_size=settings.WS_SEND_QUEUE_SIZE,
    )
    return Container(
        verifier=verifier,
        presence=presence,
        rooms=rooms,
        relay=relay,
        lifecycle=lifecycle,
        gateway=gateway,
        heartbeat_seconds=settings.WS_HEARTBEAT_SECONDS,
        history_limit=settings.HISTORY_PAGE_LIMIT,
    )
