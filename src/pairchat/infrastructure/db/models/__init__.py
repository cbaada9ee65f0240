"""Import all models so Base.metadata knows every table."""
from pairchat.infrastructure.db.models.conversation import (
    ConversationModel,
    ConversationUnreadModel,
)
from pairchat.infrastructure.db.models.draft import DraftModel
from pairchat.infrastructure.db.models.message import MessageModel
from pairchat.infrastructure.db.models.user import UserModel

__all__ = [
    "ConversationModel",
    "ConversationUnreadModel",
    "DraftModel",
    "MessageModel",
    "UserModel",
]
