from __future__ import annotations

from typing import Protocol


class PresenceStore(Protocol):
    """Set of user ids currently holding a live connection."""

    async def add(self, user_id: int) -> None: ...

    async def remove(self, user_id: int) -> None: ...

    async def contains(self, user_id: int) -> bool: ...

    async def count(self) -> int: ...

    async def members(self) -> set[int]: ...
