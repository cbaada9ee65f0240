from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pairchat.domain.entities.message import Message
from pairchat.infrastructure.db.mappers import message as mapper
from pairchat.infrastructure.db.models.message import MessageModel
from pairchat.infrastructure.db.repositories._cursor import decode_cursor


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, message_id: UUID) -> Message | None:
        result = await self._session.get(MessageModel, message_id, populate_existing=True)
        return mapper.model_to_entity(result) if result else None

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.conversation_id == conversation_id)
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
            .limit(limit)
        )
        if cursor:
            ts, mid = decode_cursor(cursor)
            stmt = stmt.where(
                (MessageModel.created_at < ts)
                | ((MessageModel.created_at == ts) & (MessageModel.id < mid))
            )
        result = await self._session.execute(stmt)
        # Newest page first, each page read oldest to newest
        return [mapper.model_to_entity(m) for m in reversed(result.scalars().all())]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def mark_read(self, message_id: UUID, receiver_id: int, ts: datetime) -> bool:
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.id == message_id,
                MessageModel.receiver_id == receiver_id,
                MessageModel.read_at.is_(None),
            )
            .values(read_at=ts)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def mark_conversation_read(
        self,
        conversation_id: UUID,
        receiver_id: int,
        ts: datetime,
    ) -> int:
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.receiver_id == receiver_id,
                MessageModel.read_at.is_(None),
            )
            .values(read_at=ts)
        )
        result = await self._session.execute(stmt)
        return result.rowcount
