from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from pairchat.domain.entities.conversation import Conversation
from pairchat.infrastructure.db.mappers import conversation as mapper
from pairchat.infrastructure.db.models.conversation import (
    ConversationModel,
    ConversationUnreadModel,
)
from pairchat.infrastructure.db.repositories._cursor import decode_cursor


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        stmt = (
            select(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def get_by_pair(self, a: int, b: int) -> Conversation | None:
        low, high = (a, b) if a <= b else (b, a)
        stmt = (
            select(ConversationModel)
            .where(
                ConversationModel.participant_low == low,
                ConversationModel.participant_high == high,
            )
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_for_user(
        self,
        user_id: int,
        *,
        cursor: str | None = None,
        limit: int = 20,
    ) -> list[Conversation]:
        stmt = (
            select(ConversationModel)
            .where(
                or_(
                    ConversationModel.participant_low == user_id,
                    ConversationModel.participant_high == user_id,
                )
            )
            .order_by(ConversationModel.updated_at.desc(), ConversationModel.id)
            .limit(limit)
        )
        if cursor:
            ts, cid = decode_cursor(cursor)
            stmt = stmt.where(
                (ConversationModel.updated_at < ts)
                | (
                    (ConversationModel.updated_at == ts)
                    & (ConversationModel.id > cid)
                )
            )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def unread_total(self, user_id: int) -> int:
        stmt = select(func.coalesce(func.sum(ConversationUnreadModel.count), 0)).where(
            ConversationUnreadModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_or_create_pair(
        self,
        conversation: Conversation,
    ) -> tuple[Conversation, bool]:
        stmt = (
            pg_insert(ConversationModel)
            .values(
                id=conversation.id,
                participant_low=conversation.participant_low,
                participant_high=conversation.participant_high,
                last_message_id=None,
                created_at=conversation.created_at,
                updated_at=conversation.updated_at,
            )
            .on_conflict_do_nothing(constraint="uq_conversation_pair")
            .returning(ConversationModel.id)
        )
        result = await self._session.execute(stmt)
        if result.scalar_one_or_none() is not None:
            return conversation, True

        # Conflict: another transaction created the pair first
        stmt = select(ConversationModel).where(
            ConversationModel.participant_low == conversation.participant_low,
            ConversationModel.participant_high == conversation.participant_high,
        )
        existing = (await self._session.execute(stmt)).scalar_one()
        return mapper.model_to_entity(existing), False

    async def set_last_message(self, conversation_id: UUID, message_id: UUID) -> None:
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values(last_message_id=message_id, updated_at=func.now())
        )
        await self._session.execute(stmt)

    async def increment_unread(self, conversation_id: UUID, user_id: int) -> None:
        stmt = pg_insert(ConversationUnreadModel).values(
            conversation_id=conversation_id,
            user_id=user_id,
            count=1,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                ConversationUnreadModel.conversation_id,
                ConversationUnreadModel.user_id,
            ],
            set_={"count": ConversationUnreadModel.count + 1},
        )
        await self._session.execute(stmt)

    async def decrement_unread(self, conversation_id: UUID, user_id: int) -> None:
        stmt = (
            update(ConversationUnreadModel)
            .where(
                ConversationUnreadModel.conversation_id == conversation_id,
                ConversationUnreadModel.user_id == user_id,
            )
            .values(count=func.greatest(ConversationUnreadModel.count - 1, 0))
        )
        await self._session.execute(stmt)

    async def reset_unread(self, conversation_id: UUID, user_id: int) -> None:
        stmt = (
            update(ConversationUnreadModel)
            .where(
                ConversationUnreadModel.conversation_id == conversation_id,
                ConversationUnreadModel.user_id == user_id,
            )
            .values(count=0)
        )
        await self._session.execute(stmt)

    async def delete(self, conversation_id: UUID) -> None:
        # messages and unread rows go with it (ON DELETE CASCADE)
        await self._session.execute(
            delete(ConversationModel).where(ConversationModel.id == conversation_id)
        )
