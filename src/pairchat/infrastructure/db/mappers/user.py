from __future__ import annotations

from pairchat.domain.entities.user import User
from pairchat.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        is_active=model.is_active,
        last_seen_at=model.last_seen_at,
    )
