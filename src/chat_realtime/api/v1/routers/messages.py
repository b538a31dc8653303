from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from chat_realtime.api.deps import ContainerDep, CurrentPrincipal, LifecycleDep
from chat_realtime.api.v1.schemas.message import (
    EditMessageRequest,
    MarkReadResponse,
    MessageResponse,
    SendMessageRequest,
)

router = APIRouter(prefix="/api/v1/chat", tags=["messages"])


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    lifecycle: LifecycleDep,
    container: ContainerDep,
    before: UUID | None = Query(None),
    limit: int | None = Query(None, ge=1, le=200),
) -> list[MessageResponse]:
    views = await lifecycle.list_messages(
        principal.actor_id,
        conversation_id,
        before=before,
        limit=limit or container.history_limit,
    )
    return [MessageResponse.from_view(v) for v in views]


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    conversation_id: UUID,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    lifecycle: LifecycleDep,
) -> MessageResponse:
    view = await lifecycle.create(principal.actor_id, conversation_id, body.text)
    return MessageResponse.from_view(view)


@router.patch("/messages/{message_id}", response_model=MessageResponse)
async def edit_message(
    message_id: UUID,
    body: EditMessageRequest,
    principal: CurrentPrincipal,
    lifecycle: LifecycleDep,
) -> MessageResponse:
    view = await lifecycle.edit(principal.actor_id, message_id, body.text)
    return MessageResponse.from_view(view)


@router.delete("/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: UUID,
    principal: CurrentPrincipal,
    lifecycle: LifecycleDep,
) -> Response:
    await lifecycle.soft_delete(principal.actor_id, message_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/conversations/{conversation_id}/read", response_model=MarkReadResponse)
async def mark_conversation_read(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    lifecycle: LifecycleDep,
) -> MarkReadResponse:
    marked = await lifecycle.mark_conversation_read(principal.actor_id, conversation_id)
    return MarkReadResponse(marked=marked)
