from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from pairchat.application.exceptions import NotFoundError, ValidationError
from pairchat.application.policies.permissions import (
    assert_conversation_access,
    assert_message_receiver,
)
from pairchat.application.ports.search import MessageIndexer
from pairchat.application.uow import UnitOfWork
from pairchat.domain.entities.message import Message
from pairchat.domain.events.message_created import MessageCreated
from pairchat.services import conversation_service

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 1000


def clean_content(content: object) -> str:
    if not isinstance(content, str):
        raise ValidationError("Message content is required")
    content = content.strip()
    if not content:
        raise ValidationError("Message content is required")
    if len(content) > MAX_CONTENT_LENGTH:
        raise ValidationError(f"Message cannot exceed {MAX_CONTENT_LENGTH} characters")
    return content


async def append_message(
    sender_id: int,
    receiver_id: int,
    content: str,
    uow: UnitOfWork,
    *,
    now: datetime | None = None,
) -> MessageCreated:
    """Write a message and its conversation bookkeeping without committing."""
    now = now or datetime.now(timezone.utc)
    conversation, conversation_created = (
        await conversation_service.get_or_create_pair_conversation(
            sender_id, receiver_id, uow, now=now,
        )
    )

    msg = Message(
        id=uuid.uuid4(),
        conversation_id=conversation.id,
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        read_at=None,
        edited=False,
        edited_at=None,
        created_at=now,
    )
    msg = await uow.messages_w.create(msg)
    await uow.conversations_w.set_last_message(conversation.id, msg.id)
    await uow.conversations_w.increment_unread(conversation.id, receiver_id)

    return MessageCreated(
        message=msg,
        conversation_id=conversation.id,
        conversation_created=conversation_created,
    )


async def create_message(
    sender_id: int,
    receiver_id: int,
    content: object,
    uow: UnitOfWork,
    *,
    indexer: MessageIndexer | None = None,
    now: datetime | None = None,
) -> MessageCreated:
    """Create a message between two users.

    Not idempotent: calling twice with the same arguments stores two
    messages in the same conversation.
    """
    body = clean_content(content)
    event = await append_message(sender_id, receiver_id, body, uow, now=now)
    await uow.commit()
    await index_message(indexer, event.message)
    return event


async def index_message(indexer: MessageIndexer | None, message: Message) -> None:
    """Best-effort search indexing; failures never reach the caller."""
    if indexer is None:
        return
    try:
        await indexer.index(message)
    except Exception:
        logger.warning("Search indexing failed for message %s", message.id, exc_info=True)


async def list_messages(
    conversation_id: uuid.UUID,
    user_id: int,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[Message]:
    conversation = await uow.conversations.get_by_id(conversation_id)
    assert_conversation_access(user_id, conversation)
    return await uow.messages.list_messages(
        conversation_id, cursor=cursor, limit=limit,
    )


async def mark_conversation_read(
    conversation_id: uuid.UUID,
    user_id: int,
    uow: UnitOfWork,
    *,
    now: datetime | None = None,
) -> int:
    """Mark everything addressed to the user as read and zero their counter.

    Both writes share one transaction. Returns the number of messages marked.
    """
    conversation = await uow.conversations.get_by_id(conversation_id)
    assert_conversation_access(user_id, conversation)

    now = now or datetime.now(timezone.utc)
    marked = await uow.messages_w.mark_conversation_read(conversation_id, user_id, now)
    await uow.conversations_w.reset_unread(conversation_id, user_id)
    await uow.commit()
    return marked


async def mark_message_read(
    message_id: uuid.UUID,
    user_id: int,
    uow: UnitOfWork,
    *,
    now: datetime | None = None,
) -> Message:
    msg = await uow.messages.get_by_id(message_id)
    if msg is None:
        raise NotFoundError("Message not found")
    assert_message_receiver(user_id, msg.receiver_id)

    now = now or datetime.now(timezone.utc)
    changed = await uow.messages_w.mark_read(message_id, user_id, now)
    if changed:
        await uow.conversations_w.decrement_unread(msg.conversation_id, user_id)
        await uow.commit()
        return await uow.messages.get_by_id(message_id) or msg
    return msg
