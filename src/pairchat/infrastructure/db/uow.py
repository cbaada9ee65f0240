from __future__ import annotations

from types import TracebackType
from typing import Self

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pairchat.application.uow import UoWFactory
from pairchat.infrastructure.db.repositories.conversation import (
    ConversationReaderRepo,
    ConversationWriterRepo,
)
from pairchat.infrastructure.db.repositories.draft import DraftReaderRepo, DraftWriterRepo
from pairchat.infrastructure.db.repositories.message import (
    MessageReaderRepo,
    MessageWriterRepo,
)
from pairchat.infrastructure.db.repositories.user import UserReaderRepo


class SqlAlchemyUoW:
    """Unit of work over one AsyncSession, opened on enter and closed on exit.

    Anything not committed when the block exits is rolled back, including
    row locks taken by `drafts_w.claim_due`.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    def _bind(self, session: AsyncSession) -> None:
        self._session = session
        self.users = UserReaderRepo(session)
        self.drafts = DraftReaderRepo(session)
        self.drafts_w = DraftWriterRepo(session)
        self.conversations = ConversationReaderRepo(session)
        self.conversations_w = ConversationWriterRepo(session)
        self.messages = MessageReaderRepo(session)
        self.messages_w = MessageWriterRepo(session)

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Unit of work used outside `async with`")
        return self._session

    async def flush(self) -> None:
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    async def __aenter__(self) -> Self:
        self._bind(self._session_factory())
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        session, self._session = self.session, None
        try:
            if exc_type is not None:
                await session.rollback()
        finally:
            await session.close()


def sqlalchemy_uow_factory(session_factory: async_sessionmaker[AsyncSession]) -> UoWFactory:
    """Every call gives a fresh unit of work with its own session."""
    return lambda: SqlAlchemyUoW(session_factory)
