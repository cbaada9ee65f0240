from __future__ import annotations

from datetime import datetime
from typing import Protocol

from pairchat.domain.entities.user import User


class UserReader(Protocol):
    async def list_active_since(self, since: datetime) -> list[User]:
        """Users with is_active=True whose last activity is at or after `since`."""
        ...

    async def get_by_id(self, user_id: int) -> User | None: ...
