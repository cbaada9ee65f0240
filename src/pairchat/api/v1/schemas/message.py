from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class MessageResponse(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_id: int
    receiver_id: int
    content: str
    read_at: datetime | None
    edited: bool
    edited_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class UnreadResponse(BaseModel):
    unread: int


class SendMessageRequest(BaseModel):
    receiver_id: int
    content: str
