from __future__ import annotations

from enum import StrEnum


class PairingMode(StrEnum):
    DISJOINT = "disjoint"
    WRAPAROUND = "wraparound"


class RoomKind(StrEnum):
    USER = "user"
    CONVERSATION = "conversation"
