from __future__ import annotations

from pairchat.domain.entities.draft import Draft
from pairchat.infrastructure.db.models.draft import DraftModel


def model_to_entity(model: DraftModel) -> Draft:
    return Draft(
        id=model.id,
        sender_id=model.sender_id,
        receiver_id=model.receiver_id,
        content=model.content,
        send_at=model.send_at,
        queued=model.queued,
        queued_at=model.queued_at,
        sent=model.sent,
        sent_at=model.sent_at,
        created_at=model.created_at,
    )


def entity_to_values(entity: Draft) -> dict:
    """Column values for bulk inserts."""
    return {
        "id": entity.id,
        "sender_id": entity.sender_id,
        "receiver_id": entity.receiver_id,
        "content": entity.content,
        "send_at": entity.send_at,
        "queued": entity.queued,
        "queued_at": entity.queued_at,
        "sent": entity.sent,
        "sent_at": entity.sent_at,
        "created_at": entity.created_at,
    }
