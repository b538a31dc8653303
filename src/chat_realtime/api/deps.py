"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.requests import HTTPConnection
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from chat_realtime.application.dto.principal import Principal
from chat_realtime.application.exceptions import UnauthenticatedError
from chat_realtime.container import Container
from chat_realtime.services.lifecycle import MessageLifecycleManager

_bearer_scheme = HTTPBearer(auto_error=False)


def get_container(conn: HTTPConnection) -> Container:
    return conn.app.state.container


ContainerDep = Annotated[Container, Depends(get_container)]


def get_lifecycle(container: ContainerDep) -> MessageLifecycleManager:
    return container.lifecycle


LifecycleDep = Annotated[MessageLifecycleManager, Depends(get_lifecycle)]


async def get_current_principal(
    container: ContainerDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> Principal:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return await container.gateway.authenticate(credentials.credentials)
    except UnauthenticatedError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
