from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol

from pairchat.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
)
from pairchat.application.repositories.draft import DraftReader, DraftWriter
from pairchat.application.repositories.message import MessageReader, MessageWriter
from pairchat.application.repositories.user import UserReader


class UnitOfWork(Protocol):
    users: UserReader
    drafts: DraftReader
    drafts_w: DraftWriter
    conversations: ConversationReader
    conversations_w: ConversationWriter
    messages: MessageReader
    messages_w: MessageWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
