from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    conversation_id: UUID
    sender_id: int
    receiver_id: int
    content: str
    read_at: datetime | None
    edited: bool
    edited_at: datetime | None
    created_at: datetime
