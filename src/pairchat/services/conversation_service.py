from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pairchat.application.policies.permissions import assert_conversation_access
from pairchat.application.uow import UnitOfWork
from pairchat.domain.entities.conversation import Conversation, normalize_pair


async def get_or_create_pair_conversation(
    a: int,
    b: int,
    uow: UnitOfWork,
    *,
    now: datetime | None = None,
) -> tuple[Conversation, bool]:
    """Return the conversation between two users, creating it on first contact.

    (a, b) and (b, a) resolve to the same row. Does not commit; the caller
    owns the transaction.
    """
    low, high = normalize_pair(a, b)
    existing = await uow.conversations.get_by_pair(low, high)
    if existing is not None:
        return existing, False

    now = now or datetime.now(timezone.utc)
    conversation = Conversation(
        id=uuid.uuid4(),
        participant_low=low,
        participant_high=high,
        last_message_id=None,
        created_at=now,
        updated_at=now,
    )
    # A concurrent creator may win the race; the writer returns its row then.
    return await uow.conversations_w.get_or_create_pair(conversation)


async def list_user_conversations(
    user_id: int,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[Conversation]:
    return await uow.conversations.list_for_user(user_id, cursor=cursor, limit=limit)


async def get_conversation(
    conversation_id: uuid.UUID,
    user_id: int,
    uow: UnitOfWork,
) -> Conversation:
    conversation = await uow.conversations.get_by_id(conversation_id)
    return assert_conversation_access(user_id, conversation)


async def delete_conversation(
    conversation_id: uuid.UUID,
    user_id: int,
    uow: UnitOfWork,
) -> None:
    """Remove the conversation with its messages and unread counters."""
    conversation = await uow.conversations.get_by_id(conversation_id)
    assert_conversation_access(user_id, conversation)
    await uow.conversations_w.delete(conversation_id)
    await uow.commit()


async def unread_total(user_id: int, uow: UnitOfWork) -> int:
    return await uow.conversations.unread_total(user_id)
