from __future__ import annotations


class InMemoryPresenceStore:
    """Process-local presence set; for single-instance deployments and tests."""

    def __init__(self) -> None:
        self._online: set[int] = set()

    async def add(self, user_id: int) -> None:
        self._online.add(user_id)

    async def remove(self, user_id: int) -> None:
        self._online.discard(user_id)

    async def contains(self, user_id: int) -> bool:
        return user_id in self._online

    async def count(self) -> int:
        return len(self._online)

    async def members(self) -> set[int]:
        return set(self._online)
