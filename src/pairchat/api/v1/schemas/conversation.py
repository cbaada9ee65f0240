from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from pairchat.domain.entities.conversation import Conversation


class ConversationResponse(BaseModel):
    id: UUID
    participants: list[int]
    other_participant: int
    last_message_id: UUID | None
    unread_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def for_user(cls, conv: Conversation, user_id: int) -> ConversationResponse:
        """Render the conversation from one participant's point of view."""
        return cls(
            id=conv.id,
            participants=list(conv.participants),
            other_participant=conv.other_participant(user_id),
            last_message_id=conv.last_message_id,
            unread_count=conv.unread_for(user_id),
            created_at=conv.created_at,
            updated_at=conv.updated_at,
        )


class MarkReadResponse(BaseModel):
    conversation_id: UUID
    marked: int
