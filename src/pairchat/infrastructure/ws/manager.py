"""In-process WebSocket connection registry with addressable rooms."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable
from uuid import UUID

from fastapi import WebSocket

from pairchat.domain.value_objects.enums import RoomKind
from pairchat.infrastructure.ws.protocol import encode

logger = logging.getLogger(__name__)


def user_room(user_id: int) -> str:
    return f"{RoomKind.USER}:{user_id}"


def conversation_room(conversation_id: UUID) -> str:
    return f"{RoomKind.CONVERSATION}:{conversation_id}"


@dataclass(eq=False)
class Connection:
    ws: WebSocket
    user_id: int
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    rooms: set[str] = field(default_factory=set)
    # Set when a newer connection for the same user replaced this one.
    evicted: bool = False


class ConnectionManager:
    """Tracks live connections per user and room membership.

    Only sees connections of the current process.
    """

    def __init__(self) -> None:
        self._by_user: dict[int, set[Connection]] = {}
        self._rooms: dict[str, set[Connection]] = {}

    def register(self, conn: Connection) -> None:
        self._by_user.setdefault(conn.user_id, set()).add(conn)
        logger.debug("WS registered: user=%s conn=%s (users=%d)", conn.user_id, conn.id, len(self._by_user))

    def unregister(self, conn: Connection) -> bool:
        """Forget a connection. Returns False if it was not registered."""
        conns = self._by_user.get(conn.user_id)
        if not conns or conn not in conns:
            return False
        conns.discard(conn)
        if not conns:
            del self._by_user[conn.user_id]
        for room in list(conn.rooms):
            self.leave(conn, room)
        logger.debug("WS unregistered: user=%s conn=%s", conn.user_id, conn.id)
        return True

    def connections_for(self, user_id: int) -> list[Connection]:
        return list(self._by_user.get(user_id, ()))

    def all_connections(self) -> list[Connection]:
        return [c for conns in self._by_user.values() for c in conns]

    def join(self, conn: Connection, room: str) -> None:
        self._rooms.setdefault(room, set()).add(conn)
        conn.rooms.add(room)

    def leave(self, conn: Connection, room: str) -> None:
        members = self._rooms.get(room)
        if members:
            members.discard(conn)
            if not members:
                del self._rooms[room]
        conn.rooms.discard(room)

    async def send(self, conn: Connection, event: str, data: dict[str, Any]) -> bool:
        return await self._send_raw(conn, encode(event, data))

    async def emit_to_rooms(
        self,
        rooms: Iterable[str],
        event: str,
        data: dict[str, Any],
        *,
        exclude: Connection | None = None,
    ) -> int:
        """Send once to every connection in any of the rooms. Returns deliveries."""
        targets: set[Connection] = set()
        for room in rooms:
            targets.update(self._rooms.get(room, ()))
        if exclude is not None:
            targets.discard(exclude)
        return await self._send_all(targets, encode(event, data))

    async def emit_to_room(
        self,
        room: str,
        event: str,
        data: dict[str, Any],
        *,
        exclude: Connection | None = None,
    ) -> int:
        return await self.emit_to_rooms([room], event, data, exclude=exclude)

    async def broadcast(
        self,
        event: str,
        data: dict[str, Any],
        *,
        exclude: Connection | None = None,
    ) -> int:
        targets = {c for c in self.all_connections() if c is not exclude}
        return await self._send_all(targets, encode(event, data))

    async def _send_all(self, targets: Iterable[Connection], raw: str) -> int:
        delivered = 0
        for conn in targets:
            if await self._send_raw(conn, raw):
                delivered += 1
        return delivered

    async def _send_raw(self, conn: Connection, raw: str) -> bool:
        # A dead socket is cleaned up by its own read loop.
        try:
            await conn.ws.send_text(raw)
            return True
        except Exception:
            logger.debug("WS send failed: user=%s conn=%s", conn.user_id, conn.id, exc_info=True)
            return False
