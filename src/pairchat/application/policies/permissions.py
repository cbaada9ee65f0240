from __future__ import annotations

from pairchat.application.exceptions import ForbiddenError, NotFoundError
from pairchat.domain.entities.conversation import Conversation


def assert_conversation_access(
    user_id: int,
    conversation: Conversation | None,
) -> Conversation:
    """Raise if conversation doesn't exist or the user is not one of its pair."""
    if conversation is None:
        raise NotFoundError("Conversation not found")

    if not conversation.has_participant(user_id):
        # Same answer as a missing conversation: ids of other pairs don't leak.
        raise NotFoundError("Conversation not found")

    return conversation


def assert_message_receiver(user_id: int, receiver_id: int) -> None:
    if user_id != receiver_id:
        raise ForbiddenError("Only the receiver can mark a message as read")
