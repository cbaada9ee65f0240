from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pairchat.domain.entities.draft import Draft
from pairchat.infrastructure.db.mappers import draft as mapper
from pairchat.infrastructure.db.models.draft import DraftModel


class DraftReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, draft_id: UUID) -> Draft | None:
        result = await self._session.get(DraftModel, draft_id, populate_existing=True)
        return mapper.model_to_entity(result) if result else None


class DraftWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def bulk_create(self, drafts: list[Draft]) -> int:
        if not drafts:
            return 0
        await self._session.execute(
            insert(DraftModel),
            [mapper.entity_to_values(d) for d in drafts],
        )
        return len(drafts)

    async def claim_due(self, now: datetime, limit: int) -> list[Draft]:
        stmt = (
            select(DraftModel)
            .where(
                DraftModel.send_at <= now,
                DraftModel.queued.is_(False),
                DraftModel.sent.is_(False),
            )
            .order_by(DraftModel.send_at.asc(), DraftModel.id.asc())
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def mark_queued(self, draft_ids: list[UUID], ts: datetime) -> None:
        if not draft_ids:
            return
        stmt = (
            update(DraftModel)
            .where(DraftModel.id.in_(draft_ids), DraftModel.queued.is_(False))
            .values(queued=True, queued_at=ts)
        )
        await self._session.execute(stmt)

    async def mark_sent(self, draft_id: UUID, ts: datetime) -> None:
        stmt = (
            update(DraftModel)
            .where(DraftModel.id == draft_id, DraftModel.sent.is_(False))
            .values(
                queued=True,
                queued_at=func.coalesce(DraftModel.queued_at, ts),
                sent=True,
                sent_at=ts,
            )
        )
        await self._session.execute(stmt)

    async def delete_sent_before(self, cutoff: datetime) -> int:
        stmt = delete(DraftModel).where(
            DraftModel.sent.is_(True),
            DraftModel.sent_at < cutoff,
        )
        result = await self._session.execute(stmt)
        return result.rowcount
