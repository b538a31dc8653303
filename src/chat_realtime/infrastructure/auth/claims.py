from __future__ import annotations

from typing import Any
from uuid import UUID

from chat_realtime.application.dto.principal import Principal
from chat_realtime.application.exceptions import UnauthenticatedError


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Build a Principal from decoded JWT claims.

    The actor id is taken from ``sub``; older tokens carry it as ``userId``.
    """
    raw = payload.get("sub") or payload.get("userId")
    if not raw:
        raise UnauthenticatedError("Token has no subject")
    try:
        actor_id = UUID(str(raw))
    except ValueError as exc:
        raise UnauthenticatedError("Token subject is not a valid actor id") from exc
    roles = payload.get("roles", [])
    return Principal(actor_id=actor_id, roles=list(roles) if isinstance(roles, list) else [])
