from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pairchat.domain.entities.user import User
from pairchat.infrastructure.db.mappers import user as mapper
from pairchat.infrastructure.db.models.user import UserModel


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_active_since(self, since: datetime) -> list[User]:
        stmt = (
            select(UserModel)
            .where(
                UserModel.is_active.is_(True),
                UserModel.last_seen_at >= since,
            )
            .order_by(UserModel.id)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def get_by_id(self, user_id: int) -> User | None:
        result = await self._session.get(UserModel, user_id)
        return mapper.model_to_entity(result) if result else None
