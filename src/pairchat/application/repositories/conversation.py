from __future__ import annotations

from typing import Protocol
from uuid import UUID

from pairchat.domain.entities.conversation import Conversation


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None: ...

    async def get_by_pair(self, a: int, b: int) -> Conversation | None: ...

    async def list_for_user(
        self,
        user_id: int,
        *,
        cursor: str | None = None,
        limit: int = 20,
    ) -> list[Conversation]: ...

    async def unread_total(self, user_id: int) -> int: ...


class ConversationWriter(Protocol):
    async def get_or_create_pair(self, conversation: Conversation) -> tuple[Conversation, bool]:
        """Insert unless the participant pair exists. Returns (conversation, created)."""
        ...

    async def set_last_message(self, conversation_id: UUID, message_id: UUID) -> None: ...

    async def increment_unread(self, conversation_id: UUID, user_id: int) -> None: ...

    async def decrement_unread(self, conversation_id: UUID, user_id: int) -> None:
        """Decrease by one, never below zero."""
        ...

    async def reset_unread(self, conversation_id: UUID, user_id: int) -> None: ...

    async def delete(self, conversation_id: UUID) -> None: ...
