from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


def normalize_pair(a: int, b: int) -> tuple[int, int]:
    """Order-independent key for a pairwise conversation."""
    return (a, b) if a <= b else (b, a)


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    participant_low: int
    participant_high: int
    last_message_id: UUID | None
    created_at: datetime
    updated_at: datetime
    unread_counts: dict[int, int] = field(default_factory=dict)

    @property
    def participants(self) -> tuple[int, int]:
        return (self.participant_low, self.participant_high)

    def has_participant(self, user_id: int) -> bool:
        return user_id in self.participants

    def other_participant(self, user_id: int) -> int:
        return self.participant_high if user_id == self.participant_low else self.participant_low

    def unread_for(self, user_id: int) -> int:
        return self.unread_counts.get(user_id, 0)
