from __future__ import annotations

from datetime import datetime
from typing import Callable, Generic, Sequence, TypeVar
from uuid import UUID

from pydantic import BaseModel

from pairchat.infrastructure.db.repositories._cursor import encode_cursor

T = TypeVar("T")
E = TypeVar("E")


class PaginatedResponse(BaseModel, Generic[T]):
    """Keyset page. `next_cursor` is set only when the page came back full."""

    items: list[T]  # type: ignore[type-var]
    next_cursor: str | None = None

    @classmethod
    def page(
        cls,
        rows: Sequence[E],
        limit: int,
        render: Callable[[E], T],
        key: Callable[[E], tuple[datetime, UUID]],
        *,
        backwards: bool = False,
    ) -> PaginatedResponse[T]:
        """`backwards` pages walk back in time: the cursor is their first row."""
        next_cursor = None
        if rows and len(rows) == limit:
            next_cursor = encode_cursor(*key(rows[0] if backwards else rows[-1]))
        return cls(items=[render(r) for r in rows], next_cursor=next_cursor)
