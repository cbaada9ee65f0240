from __future__ import annotations

from pairchat.domain.entities.conversation import Conversation
from pairchat.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.id,
        participant_low=model.participant_low,
        participant_high=model.participant_high,
        last_message_id=model.last_message_id,
        created_at=model.created_at,
        updated_at=model.updated_at,
        unread_counts={row.user_id: row.count for row in model.unread or []},
    )


def entity_to_model(entity: Conversation) -> ConversationModel:
    return ConversationModel(
        id=entity.id,
        participant_low=entity.participant_low,
        participant_high=entity.participant_high,
        last_message_id=entity.last_message_id,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )
