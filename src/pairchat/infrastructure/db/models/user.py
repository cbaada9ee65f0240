from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, Index, text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from pairchat.infrastructure.db.base import Base


class UserModel(Base):
    """Profile table owned by the auth service; only the columns read here are mapped."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )
    last_seen_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_users_active_last_seen", "is_active", "last_seen_at"),
    )
