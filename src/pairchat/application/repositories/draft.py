from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from pairchat.domain.entities.draft import Draft


class DraftReader(Protocol):
    async def get_by_id(self, draft_id: UUID) -> Draft | None: ...


class DraftWriter(Protocol):
    async def bulk_create(self, drafts: list[Draft]) -> int: ...

    async def claim_due(self, now: datetime, limit: int) -> list[Draft]:
        """Lock and return up to `limit` due, unqueued, unsent drafts.

        Rows stay locked until the unit of work commits or rolls back, so a
        concurrent claimer never sees the same draft.
        """
        ...

    async def mark_queued(self, draft_ids: list[UUID], ts: datetime) -> None: ...

    async def mark_sent(self, draft_id: UUID, ts: datetime) -> None: ...

    async def delete_sent_before(self, cutoff: datetime) -> int: ...
