from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from pairchat.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class MessageCreated:
    """Emitted once a message and its conversation bookkeeping are committed."""

    message: Message
    conversation_id: UUID
    conversation_created: bool = False

    @property
    def receiver_id(self) -> int:
        return self.message.receiver_id

    @property
    def sender_id(self) -> int:
        return self.message.sender_id
