from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class User:
    """Read-only projection of a profile record."""

    id: int
    is_active: bool
    last_seen_at: datetime | None
