from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Draft:
    """Scheduled automated message.

    State only moves forward: created -> queued -> sent.
    """

    id: UUID
    sender_id: int
    receiver_id: int
    content: str
    send_at: datetime
    queued: bool
    queued_at: datetime | None
    sent: bool
    sent_at: datetime | None
    created_at: datetime
