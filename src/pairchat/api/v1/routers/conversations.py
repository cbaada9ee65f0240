from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from pairchat.api.deps import CurrentPrincipal, UoWDep
from pairchat.api.v1.schemas.common import PaginatedResponse
from pairchat.api.v1.schemas.conversation import ConversationResponse, MarkReadResponse
from pairchat.services import conversation_service, message_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["conversations"])


@router.get("", response_model=PaginatedResponse[ConversationResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
    cursor: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
) -> PaginatedResponse[ConversationResponse]:
    convs = await conversation_service.list_user_conversations(
        principal.user_id, cursor, limit, uow,
    )
    return PaginatedResponse[ConversationResponse].page(
        convs,
        limit,
        lambda c: ConversationResponse.for_user(c, principal.user_id),
        lambda c: (c.updated_at, c.id),
    )


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationResponse:
    conv = await conversation_service.get_conversation(
        conversation_id, principal.user_id, uow,
    )
    return ConversationResponse.for_user(conv, principal.user_id)


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> Response:
    await conversation_service.delete_conversation(conversation_id, principal.user_id, uow)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{conversation_id}/read", response_model=MarkReadResponse)
async def mark_conversation_read(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MarkReadResponse:
    marked = await message_service.mark_conversation_read(
        conversation_id, principal.user_id, uow,
    )
    return MarkReadResponse(conversation_id=conversation_id, marked=marked)
