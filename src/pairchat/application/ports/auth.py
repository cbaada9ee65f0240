from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller. Only `user_id` drives authorization here."""

    user_id: int
    roles: tuple[str, ...] = field(default_factory=tuple)


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> Principal:
        """Decode and check a bearer token.

        Raises `jwt.InvalidTokenError` (or a subclass) when the token is
        unusable; callers turn that into 401 / close code 4001.
        """
        ...
