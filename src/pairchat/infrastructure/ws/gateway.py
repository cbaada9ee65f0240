"""Realtime gateway: one authoritative connection per user, presence, fan-out."""
from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from pairchat.application.exceptions import AppError
from pairchat.application.ports.presence import PresenceStore
from pairchat.application.ports.search import MessageIndexer
from pairchat.application.uow import UoWFactory
from pairchat.domain.events.message_created import MessageCreated
from pairchat.infrastructure.ws.manager import (
    Connection,
    ConnectionManager,
    conversation_room,
    user_room,
)
from pairchat.infrastructure.ws.protocol import (
    ClientEvent,
    JoinRoomPayload,
    SendMessagePayload,
    ServerEvent,
    TypingPayload,
    WsInbound,
    message_event_data,
)
from pairchat.services import conversation_service, message_service

logger = logging.getLogger(__name__)

EVICTED_CLOSE_CODE = 4000
SHUTDOWN_CLOSE_CODE = 1001


class RealtimeGateway:
    """Owns live connections for this process.

    A user is either offline or online through exactly one connection: a new
    handshake closes any connection the user already holds. Only the
    authoritative connection updates presence when it goes away, so an
    evicted socket closing late does not mark the user offline.
    """

    def __init__(
        self,
        manager: ConnectionManager,
        presence: PresenceStore,
        uow_factory: UoWFactory,
        *,
        indexer: MessageIndexer | None = None,
        heartbeat_seconds: float = 30,
    ) -> None:
        self._manager = manager
        self._presence = presence
        self._uow_factory = uow_factory
        self._indexer = indexer
        self._heartbeat_seconds = heartbeat_seconds

    @property
    def manager(self) -> ConnectionManager:
        return self._manager

    async def serve(self, ws: WebSocket, user_id: int) -> None:
        """Run one authenticated connection until it closes."""
        conn = await self.open(ws, user_id)
        if conn.evicted:
            # Replaced by a newer handshake before this one finished
            return
        heartbeat_task = asyncio.create_task(
            self._heartbeat(conn), name=f"ws-heartbeat-{user_id}",
        )
        try:
            await self._read_loop(conn)
        except WebSocketDisconnect:
            pass
        except Exception:
            logger.exception("WS error for user %s", user_id)
        finally:
            heartbeat_task.cancel()
            await self.close(conn)

    async def open(self, ws: WebSocket, user_id: int) -> Connection:
        conn = Connection(ws=ws, user_id=user_id)
        # No await between the scan and register: overlapping handshakes for
        # the same user must see each other.
        stale = self._manager.connections_for(user_id)
        for old in stale:
            old.evicted = True
            self._manager.unregister(old)
        self._manager.register(conn)
        self._manager.join(conn, user_room(user_id))

        for old in stale:
            logger.info("Disconnecting duplicate connection for user %s", user_id)
            await self._close_evicted(old)

        try:
            await ws.accept()
        except Exception:
            if conn.evicted:
                return conn
            self._manager.unregister(conn)
            if stale and not self._manager.connections_for(user_id):
                await self._set_presence(user_id, online=False)
            raise
        if conn.evicted:
            logger.info("Handshake for user %s superseded during accept", user_id)
            await self._close_evicted(conn)
            return conn

        logger.info("User %s connected", user_id)
        await self._set_presence(user_id, online=True)
        await self._manager.broadcast(
            ServerEvent.USER_ONLINE, {"userId": user_id}, exclude=conn,
        )
        return conn

    async def close(self, conn: Connection) -> None:
        was_registered = self._manager.unregister(conn)
        if conn.evicted or not was_registered:
            logger.debug("Replaced connection for user %s closed", conn.user_id)
            return

        logger.info("User %s disconnected", conn.user_id)
        await self._set_presence(conn.user_id, online=False)
        await self._manager.broadcast(ServerEvent.USER_OFFLINE, {"userId": conn.user_id})

    async def shutdown(self) -> None:
        for conn in self._manager.all_connections():
            conn.evicted = True
            self._manager.unregister(conn)
            await self._set_presence(conn.user_id, online=False)
            try:
                await conn.ws.close(code=SHUTDOWN_CLOSE_CODE)
            except Exception:
                logger.debug("WS close on shutdown failed", exc_info=True)

    async def deliver(self, event: MessageCreated) -> bool:
        """Push a message created elsewhere (e.g. a draft) to its receiver."""
        delivered = await self._manager.emit_to_room(
            user_room(event.receiver_id),
            ServerEvent.MESSAGE_RECEIVED,
            message_event_data(event),
        )
        return delivered > 0

    async def handle(self, conn: Connection, msg: WsInbound) -> None:
        try:
            if msg.type == ClientEvent.PING:
                await self._manager.send(conn, ServerEvent.PONG, {})
            elif msg.type == ClientEvent.JOIN_ROOM:
                await self._handle_join(conn, JoinRoomPayload.model_validate(msg.data))
            elif msg.type == ClientEvent.SEND_MESSAGE:
                await self._handle_send(conn, SendMessagePayload.model_validate(msg.data))
            elif msg.type in (ClientEvent.TYPING_START, ClientEvent.TYPING_STOP):
                await self._handle_typing(
                    conn,
                    TypingPayload.model_validate(msg.data),
                    started=msg.type == ClientEvent.TYPING_START,
                )
            else:
                await self._error(conn, f"Unknown event: {msg.type}", code="unknown_event")
        except PydanticValidationError:
            await self._error(conn, f"Invalid payload for {msg.type}", code="invalid_payload")

    async def _read_loop(self, conn: Connection) -> None:
        while True:
            frame = await conn.ws.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000), frame.get("reason"))
            raw = frame.get("text")
            if raw is None:
                await self._error(
                    conn, "Binary frames are not supported", code="invalid_payload",
                )
                continue
            try:
                msg = WsInbound.model_validate_json(raw)
            except PydanticValidationError:
                await self._error(conn, "Invalid payload", code="invalid_payload")
                continue
            await self.handle(conn, msg)

    async def _handle_join(self, conn: Connection, payload: JoinRoomPayload) -> None:
        try:
            async with self._uow_factory() as uow:
                await conversation_service.get_conversation(
                    payload.conversation_id, conn.user_id, uow,
                )
        except AppError as exc:
            await self._error(conn, exc.detail, code=exc.code)
            return
        except Exception:
            logger.exception("Error joining room %s", payload.conversation_id)
            await self._error(conn, "Failed to join room", code="internal")
            return

        self._manager.join(conn, conversation_room(payload.conversation_id))
        logger.info("User %s joined room %s", conn.user_id, payload.conversation_id)

    async def _handle_send(self, conn: Connection, payload: SendMessagePayload) -> None:
        try:
            async with self._uow_factory() as uow:
                event = await message_service.create_message(
                    conn.user_id,
                    payload.receiver_id,
                    payload.content,
                    uow,
                    indexer=self._indexer,
                )
        except AppError as exc:
            await self._error(conn, exc.detail, code=exc.code)
            return
        except Exception:
            logger.exception("Error sending message from user %s", conn.user_id)
            await self._error(conn, "Failed to send message", code="internal")
            return

        data = message_event_data(event)
        await self._manager.send(conn, ServerEvent.MESSAGE_SENT, data)
        if event.receiver_id != conn.user_id:
            await self._manager.emit_to_room(
                user_room(event.receiver_id), ServerEvent.MESSAGE_RECEIVED, data,
            )
        logger.info(
            "Message sent: %s from %s to %s",
            event.message.id, conn.user_id, event.receiver_id,
        )

    async def _handle_typing(
        self,
        conn: Connection,
        payload: TypingPayload,
        *,
        started: bool,
    ) -> None:
        event = ServerEvent.USER_TYPING if started else ServerEvent.USER_STOPPED_TYPING
        await self._manager.emit_to_rooms(
            [conversation_room(payload.conversation_id), user_room(payload.receiver_id)],
            event,
            {"userId": conn.user_id, "conversationId": str(payload.conversation_id)},
            exclude=conn,
        )

    async def _close_evicted(self, conn: Connection) -> None:
        try:
            await conn.ws.close(code=EVICTED_CLOSE_CODE, reason="Replaced by a newer connection")
        except Exception:
            logger.debug("Closing evicted connection failed", exc_info=True)

    async def _set_presence(self, user_id: int, *, online: bool) -> None:
        try:
            if online:
                await self._presence.add(user_id)
            else:
                await self._presence.remove(user_id)
        except Exception:
            logger.exception("Error updating presence for user %s", user_id)

    async def _error(self, conn: Connection, message: str, *, code: str = "error") -> None:
        await self._manager.send(conn, ServerEvent.ERROR, {"message": message, "code": code})

    async def _heartbeat(self, conn: Connection) -> None:
        try:
            while True:
                await asyncio.sleep(self._heartbeat_seconds)
                await self._manager.send(conn, ServerEvent.PONG, {})
        except asyncio.CancelledError:
            pass
