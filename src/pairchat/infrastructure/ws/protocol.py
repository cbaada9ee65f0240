"""WebSocket message envelopes and event payloads."""
from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from pairchat.domain.events.message_created import MessageCreated


class ClientEvent(StrEnum):
    JOIN_ROOM = "join_room"
    SEND_MESSAGE = "send_message"
    TYPING_START = "typing_start"
    TYPING_STOP = "typing_stop"
    PING = "ping"


class ServerEvent(StrEnum):
    MESSAGE_SENT = "message_sent"
    MESSAGE_RECEIVED = "message_received"
    USER_ONLINE = "user_online"
    USER_OFFLINE = "user_offline"
    USER_TYPING = "user_typing"
    USER_STOPPED_TYPING = "user_stopped_typing"
    ERROR = "error"
    PONG = "pong"


class WsInbound(BaseModel):
    """Client → Server."""

    type: str
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str
    data: dict[str, Any] = {}


class _CamelPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class JoinRoomPayload(_CamelPayload):
    conversation_id: UUID = Field(alias="conversationId")


class SendMessagePayload(_CamelPayload):
    receiver_id: int = Field(alias="receiverId")
    content: str


class TypingPayload(_CamelPayload):
    conversation_id: UUID = Field(alias="conversationId")
    receiver_id: int = Field(alias="receiverId")


class MessageOut(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_id: int
    receiver_id: int
    content: str
    read_at: datetime | None
    edited: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


def message_event_data(event: MessageCreated) -> dict[str, Any]:
    """`{message, conversationId}` body shared by message_sent / message_received."""
    return {
        "message": MessageOut.model_validate(event.message).model_dump(mode="json"),
        "conversationId": str(event.conversation_id),
    }


def encode(event: str, data: dict[str, Any]) -> str:
    return WsOutbound(type=event, data=data).model_dump_json()
