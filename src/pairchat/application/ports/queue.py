from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID


@dataclass(frozen=True, slots=True)
class QueueDelivery:
    """One received `{draftId}` reference, pending acknowledgement."""

    delivery_id: str
    draft_id: UUID
    attempt: int = 0


class DraftQueue(Protocol):
    """Durable at-least-once channel carrying draft references."""

    async def publish(self, draft_id: UUID) -> None: ...

    async def receive(self) -> QueueDelivery | None:
        """Return the next delivery, or None if nothing arrived in time."""
        ...

    async def ack(self, delivery: QueueDelivery) -> None: ...

    async def retry(self, delivery: QueueDelivery) -> None:
        """Acknowledge and requeue with attempt + 1."""
        ...

    async def dead_letter(self, delivery: QueueDelivery, reason: str) -> None: ...
