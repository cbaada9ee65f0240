from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from pairchat.domain.entities.message import Message


class MessageReader(Protocol):
    async def get_by_id(self, message_id: UUID) -> Message | None: ...

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> list[Message]:
        """Page of history ending just before `cursor` (or at the newest
        message), in chronological order."""
        ...


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message: ...

    async def mark_read(self, message_id: UUID, receiver_id: int, ts: datetime) -> bool:
        """Set read_at if still unread. Returns True if a row changed."""
        ...

    async def mark_conversation_read(
        self,
        conversation_id: UUID,
        receiver_id: int,
        ts: datetime,
    ) -> int: ...
