from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from chat_realtime.api.deps import ContainerDep, CurrentPrincipal
from chat_realtime.api.v1.schemas.presence import OnlineListResponse, PresenceResponse

router = APIRouter(prefix="/api/v1/chat/presence", tags=["presence"])


@router.get("", response_model=OnlineListResponse)
async def online_actors(
    principal: CurrentPrincipal,
    container: ContainerDep,
) -> OnlineListResponse:
    actors = await container.presence.online_actors()
    return OnlineListResponse(actor_ids=sorted(actors, key=str))


@router.get("/{actor_id}", response_model=PresenceResponse)
async def actor_presence(
    actor_id: UUID,
    principal: CurrentPrincipal,
    container: ContainerDep,
) -> PresenceResponse:
    online = await container.presence.is_online(actor_id)
    last_seen = None if online else await container.presence.last_seen(actor_id)
    return PresenceResponse(actor_id=actor_id, online=online, last_seen=last_seen)
