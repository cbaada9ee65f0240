from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pairchat.infrastructure.db.base import Base


class ConversationModel(Base):
    __tablename__ = "conversations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    # Pair stored with low <= high so (A, B) and (B, A) hit the same row.
    participant_low: Mapped[int] = mapped_column(BigInteger, nullable=False)
    participant_high: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_message_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
        onupdate=text("now()"),
    )

    # relationships
    unread = relationship(
        "ConversationUnreadModel",
        back_populates="conversation",
        lazy="selectin",
        cascade="all, delete-orphan",
    )
    messages = relationship("MessageModel", back_populates="conversation", lazy="noload")

    __table_args__ = (
        UniqueConstraint("participant_low", "participant_high", name="uq_conversation_pair"),
        CheckConstraint("participant_low <= participant_high", name="ck_conversation_pair_order"),
        Index("ix_conversations_high", "participant_high"),
        Index("ix_conversations_updated", updated_at.desc()),
    )


class ConversationUnreadModel(Base):
    __tablename__ = "conversation_unread"

    conversation_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))

    conversation = relationship("ConversationModel", back_populates="unread")

    __table_args__ = (
        CheckConstraint("count >= 0", name="ck_conversation_unread_non_negative"),
        Index("ix_conversation_unread_user", "user_id"),
    )
