from __future__ import annotations

from datetime import datetime
from uuid import UUID

from chat_realtime.api.v1.schemas.common import CamelModel


class PresenceResponse(CamelModel):
    actor_id: UUID
    online: bool
    last_seen: datetime | None = None


class OnlineListResponse(CamelModel):
    actor_ids: list[UUID]
