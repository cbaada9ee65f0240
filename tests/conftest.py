"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import json
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator
from uuid import UUID

import pytest

from pairchat.application.ports.clock import FrozenClock
from pairchat.application.ports.queue import QueueDelivery
from pairchat.domain.entities.conversation import Conversation, normalize_pair
from pairchat.domain.entities.draft import Draft
from pairchat.domain.entities.message import Message
from pairchat.domain.entities.user import User
from pairchat.domain.events.message_created import MessageCreated
from pairchat.infrastructure.db.repositories._cursor import decode_cursor

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


def make_user(user_id: int, *, active: bool = True, last_seen: datetime | None = NOW) -> User:
    return User(id=user_id, is_active=active, last_seen_at=last_seen)


def make_draft(
    *,
    sender_id: int = 1,
    receiver_id: int = 2,
    content: str = "Hi, how are you?",
    send_at: datetime = NOW - timedelta(minutes=1),
    queued: bool = False,
    sent: bool = False,
    sent_at: datetime | None = None,
) -> Draft:
    return Draft(
        id=uuid.uuid4(),
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        send_at=send_at,
        queued=queued or sent,
        queued_at=send_at if (queued or sent) else None,
        sent=sent,
        sent_at=sent_at if sent else None,
        created_at=send_at - timedelta(hours=1),
    )


def make_conversation(a: int = 42, b: int = 7, *, conversation_id: UUID | None = None) -> Conversation:
    low, high = normalize_pair(a, b)
    return Conversation(
        id=conversation_id or uuid.uuid4(),
        participant_low=low,
        participant_high=high,
        last_message_id=None,
        created_at=NOW,
        updated_at=NOW,
    )


def make_message(
    conversation: Conversation,
    *,
    sender_id: int | None = None,
    content: str = "hello",
    read: bool = False,
) -> Message:
    sender = conversation.participant_low if sender_id is None else sender_id
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation.id,
        sender_id=sender,
        receiver_id=conversation.other_participant(sender),
        content=content,
        read_at=NOW if read else None,
        edited=False,
        edited_at=None,
        created_at=NOW,
    )


# --- repositories ---------------------------------------------------------


@dataclass
class FakeUserReader:
    _store: dict[int, User] = field(default_factory=dict)

    def add(self, *users: User) -> None:
        for u in users:
            self._store[u.id] = u

    async def list_active_since(self, since: datetime) -> list[User]:
        return [
            u for u in self._store.values()
            if u.is_active and u.last_seen_at is not None and u.last_seen_at >= since
        ]

    async def get_by_id(self, user_id: int) -> User | None:
        return self._store.get(user_id)


@dataclass
class FakeDraftReader:
    _store: dict[UUID, Draft] = field(default_factory=dict)

    async def get_by_id(self, draft_id: UUID) -> Draft | None:
        return self._store.get(draft_id)


@dataclass
class FakeDraftWriter:
    _reader: FakeDraftReader

    async def bulk_create(self, drafts: list[Draft]) -> int:
        for d in drafts:
            self._reader._store[d.id] = d
        return len(drafts)

    async def claim_due(self, now: datetime, limit: int) -> list[Draft]:
        due = sorted(
            (
                d for d in self._reader._store.values()
                if not d.queued and not d.sent and d.send_at <= now
            ),
            key=lambda d: d.send_at,
        )
        return due[:limit]

    async def mark_queued(self, draft_ids: list[UUID], ts: datetime) -> None:
        for draft_id in draft_ids:
            draft = self._reader._store[draft_id]
            if not draft.queued:
                self._reader._store[draft_id] = replace(draft, queued=True, queued_at=ts)

    async def mark_sent(self, draft_id: UUID, ts: datetime) -> None:
        draft = self._reader._store[draft_id]
        if draft.sent:
            return
        self._reader._store[draft_id] = replace(
            draft,
            queued=True,
            queued_at=draft.queued_at or ts,
            sent=True,
            sent_at=ts,
        )

    async def delete_sent_before(self, cutoff: datetime) -> int:
        stale = [
            d.id for d in self._reader._store.values()
            if d.sent and d.sent_at is not None and d.sent_at < cutoff
        ]
        for draft_id in stale:
            del self._reader._store[draft_id]
        return len(stale)


@dataclass
class FakeMessageReader:
    _messages: dict[UUID, Message] = field(default_factory=dict)

    def add(self, *messages: Message) -> None:
        for m in messages:
            self._messages[m.id] = m

    def for_conversation(self, conversation_id: UUID) -> list[Message]:
        return [m for m in self._messages.values() if m.conversation_id == conversation_id]

    async def get_by_id(self, message_id: UUID) -> Message | None:
        return self._messages.get(message_id)

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> list[Message]:
        newest_first = sorted(
            self.for_conversation(conversation_id),
            key=lambda m: (m.created_at, m.id),
            reverse=True,
        )
        if cursor:
            before = decode_cursor(cursor)
            newest_first = [m for m in newest_first if (m.created_at, m.id) < before]
        return list(reversed(newest_first[:limit]))


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def create(self, message: Message) -> Message:
        self._reader._messages[message.id] = message
        return message

    async def mark_read(self, message_id: UUID, receiver_id: int, ts: datetime) -> bool:
        msg = self._reader._messages.get(message_id)
        if msg is None or msg.receiver_id != receiver_id or msg.read_at is not None:
            return False
        self._reader._messages[message_id] = replace(msg, read_at=ts)
        return True

    async def mark_conversation_read(
        self,
        conversation_id: UUID,
        receiver_id: int,
        ts: datetime,
    ) -> int:
        marked = 0
        for msg in self._reader.for_conversation(conversation_id):
            if msg.receiver_id == receiver_id and msg.read_at is None:
                self._reader._messages[msg.id] = replace(msg, read_at=ts)
                marked += 1
        return marked


@dataclass
class FakeConversationReader:
    _store: dict[UUID, Conversation] = field(default_factory=dict)
    _unread: dict[tuple[UUID, int], int] = field(default_factory=dict)

    def add(self, *conversations: Conversation) -> None:
        for c in conversations:
            self._store[c.id] = c

    def _with_unread(self, conv: Conversation) -> Conversation:
        counts = {uid: n for (cid, uid), n in self._unread.items() if cid == conv.id}
        return replace(conv, unread_counts=counts)

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        conv = self._store.get(conversation_id)
        return self._with_unread(conv) if conv else None

    async def get_by_pair(self, a: int, b: int) -> Conversation | None:
        low, high = normalize_pair(a, b)
        for conv in self._store.values():
            if conv.participants == (low, high):
                return self._with_unread(conv)
        return None

    async def list_for_user(
        self,
        user_id: int,
        *,
        cursor: str | None = None,
        limit: int = 20,
    ) -> list[Conversation]:
        convs = sorted(
            (c for c in self._store.values() if c.has_participant(user_id)),
            key=lambda c: c.updated_at,
            reverse=True,
        )
        return [self._with_unread(c) for c in convs[:limit]]

    async def unread_total(self, user_id: int) -> int:
        return sum(n for (_cid, uid), n in self._unread.items() if uid == user_id)


@dataclass
class FakeConversationWriter:
    _reader: FakeConversationReader
    _messages: FakeMessageReader

    async def get_or_create_pair(self, conversation: Conversation) -> tuple[Conversation, bool]:
        existing = await self._reader.get_by_pair(
            conversation.participant_low, conversation.participant_high,
        )
        if existing is not None:
            return existing, False
        self._reader._store[conversation.id] = conversation
        return conversation, True

    async def set_last_message(self, conversation_id: UUID, message_id: UUID) -> None:
        conv = self._reader._store[conversation_id]
        self._reader._store[conversation_id] = replace(conv, last_message_id=message_id)

    async def increment_unread(self, conversation_id: UUID, user_id: int) -> None:
        key = (conversation_id, user_id)
        self._reader._unread[key] = self._reader._unread.get(key, 0) + 1

    async def decrement_unread(self, conversation_id: UUID, user_id: int) -> None:
        key = (conversation_id, user_id)
        if key in self._reader._unread:
            self._reader._unread[key] = max(self._reader._unread[key] - 1, 0)

    async def reset_unread(self, conversation_id: UUID, user_id: int) -> None:
        key = (conversation_id, user_id)
        if key in self._reader._unread:
            self._reader._unread[key] = 0

    async def delete(self, conversation_id: UUID) -> None:
        self._reader._store.pop(conversation_id, None)
        for key in [k for k in self._reader._unread if k[0] == conversation_id]:
            del self._reader._unread[key]
        for msg in self._messages.for_conversation(conversation_id):
            del self._messages._messages[msg.id]


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests. Writes are visible immediately."""
    users: FakeUserReader = field(default_factory=FakeUserReader)
    drafts: FakeDraftReader = field(default_factory=FakeDraftReader)
    drafts_w: FakeDraftWriter | None = None
    conversations: FakeConversationReader = field(default_factory=FakeConversationReader)
    conversations_w: FakeConversationWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    commits: int = 0
    rollbacks: int = 0

    def __post_init__(self) -> None:
        if self.drafts_w is None:
            self.drafts_w = FakeDraftWriter(self.drafts)
        if self.conversations_w is None:
            self.conversations_w = FakeConversationWriter(self.conversations, self.messages)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    @property
    def _committed(self) -> bool:
        return self.commits > 0

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


def uow_factory_for(uow: FakeUoW):
    """A UoWFactory that hands out the same in-memory UoW every time."""

    @asynccontextmanager
    async def _open() -> AsyncIterator[FakeUoW]:
        try:
            yield uow
        except BaseException:
            await uow.rollback()
            raise

    return _open


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()


@pytest.fixture
def uow_factory(uow: FakeUoW):
    return uow_factory_for(uow)


# --- queue / notifier / sockets ------------------------------------------


@dataclass
class FakeDraftQueue:
    """Records every queue interaction; `fail_publish_for` makes publish raise."""
    published: list[UUID] = field(default_factory=list)
    acked: list[QueueDelivery] = field(default_factory=list)
    retried: list[QueueDelivery] = field(default_factory=list)
    dead: list[tuple[QueueDelivery, str]] = field(default_factory=list)
    fail_publish_for: set[UUID] = field(default_factory=set)

    async def publish(self, draft_id: UUID) -> None:
        if draft_id in self.fail_publish_for:
            raise ConnectionError("broker unavailable")
        self.published.append(draft_id)

    async def receive(self) -> QueueDelivery | None:
        if not self.published:
            # Stand-in for the blocking read timeout
            await asyncio.sleep(0.01)
            return None
        draft_id = self.published.pop(0)
        return QueueDelivery(delivery_id=f"{len(self.acked)}-0", draft_id=draft_id)

    async def ack(self, delivery: QueueDelivery) -> None:
        self.acked.append(delivery)

    async def retry(self, delivery: QueueDelivery) -> None:
        self.retried.append(delivery)

    async def dead_letter(self, delivery: QueueDelivery, reason: str) -> None:
        self.dead.append((delivery, reason))


@dataclass
class FakeNotifier:
    online: bool = True
    delivered: list[MessageCreated] = field(default_factory=list)

    async def deliver(self, event: MessageCreated) -> bool:
        self.delivered.append(event)
        return self.online


class FakeWebSocket:
    """Captures what the server sends; `closed_with` records the close code.

    `frames` are handed out by `receive` in order, then a disconnect.
    """

    def __init__(
        self,
        *,
        fail_send: bool = False,
        slow_accept: bool = False,
        frames: list[dict[str, Any]] | None = None,
    ) -> None:
        self.accepted = False
        self.closed_with: int | None = None
        self.sent: list[dict[str, Any]] = []
        self.fail_send = fail_send
        self.slow_accept = slow_accept
        self.frames = list(frames or [])

    async def accept(self) -> None:
        if self.slow_accept:
            await asyncio.sleep(0)
        self.accepted = True

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.closed_with = code

    async def receive(self) -> dict[str, Any]:
        if self.frames:
            return self.frames.pop(0)
        return {"type": "websocket.disconnect", "code": 1000}

    async def send_text(self, data: str) -> None:
        if self.fail_send:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(data))

    def events(self, event_type: str | None = None) -> list[dict[str, Any]]:
        return [e for e in self.sent if event_type is None or e["type"] == event_type]


def text_frame(payload: dict[str, Any]) -> dict[str, Any]:
    return {"type": "websocket.receive", "text": json.dumps(payload)}
