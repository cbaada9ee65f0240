from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, status

from pairchat.api.deps import ContainerDep, CurrentPrincipal, UoWDep
from pairchat.api.v1.schemas.common import PaginatedResponse
from pairchat.api.v1.schemas.message import (
    MessageResponse,
    SendMessageRequest,
    UnreadResponse,
)
from pairchat.services import conversation_service, message_service

router = APIRouter(prefix="/api/v1/chat", tags=["messages"])


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=PaginatedResponse[MessageResponse],
)
async def list_messages(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    cursor: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
) -> PaginatedResponse[MessageResponse]:
    messages = await message_service.list_messages(
        conversation_id, principal.user_id, cursor, limit, uow,
    )
    return PaginatedResponse[MessageResponse].page(
        messages,
        limit,
        MessageResponse.model_validate,
        lambda m: (m.created_at, m.id),
        backwards=True,
    )


@router.post(
    "/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    container: ContainerDep,
) -> MessageResponse:
    """Send over HTTP; a connected receiver still gets `message_received`."""
    event = await message_service.create_message(
        principal.user_id, body.receiver_id, body.content, uow, indexer=container.indexer,
    )
    if event.receiver_id != principal.user_id:
        await container.gateway.deliver(event)
    return MessageResponse.model_validate(event.message)


@router.post("/messages/{message_id}/read", response_model=MessageResponse)
async def mark_message_read(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MessageResponse:
    msg = await message_service.mark_message_read(message_id, principal.user_id, uow)
    return MessageResponse.model_validate(msg)


@router.get("/unread", response_model=UnreadResponse)
async def unread_count(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> UnreadResponse:
    total = await conversation_service.unread_total(principal.user_id, uow)
    return UnreadResponse(unread=total)
