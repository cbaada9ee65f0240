from __future__ import annotations

from pairchat.domain.entities.message import Message
from pairchat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        receiver_id=model.receiver_id,
        content=model.content,
        read_at=model.read_at,
        edited=model.edited,
        edited_at=model.edited_at,
        created_at=model.created_at,
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        conversation_id=entity.conversation_id,
        sender_id=entity.sender_id,
        receiver_id=entity.receiver_id,
        content=entity.content,
        read_at=entity.read_at,
        edited=entity.edited,
        edited_at=entity.edited_at,
        created_at=entity.created_at,
    )
