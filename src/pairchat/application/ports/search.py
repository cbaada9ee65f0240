from __future__ import annotations

from typing import Protocol

from pairchat.domain.entities.message import Message


class MessageIndexer(Protocol):
    async def index(self, message: Message) -> None: ...


class NullIndexer:
    """Used when no search backend is configured."""

    async def index(self, message: Message) -> None:
        return None
