"""Seed development data: creates the schema, a few active users and due drafts."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

from pairchat.config import settings
from pairchat.domain.entities.draft import Draft
from pairchat.infrastructure.content.phrases import RandomPhraseGenerator
from pairchat.infrastructure.db.base import Base
from pairchat.infrastructure.db.models import UserModel
from pairchat.infrastructure.db.session import build_engine, build_session_factory
from pairchat.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)

USER_IDS = [1, 2, 3, 4]


async def seed() -> None:
    engine = build_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = build_session_factory(engine)
    phrases = RandomPhraseGenerator()
    now = datetime.now(timezone.utc)
    try:
        async with SqlAlchemyUoW(session_factory) as uow:
            # Profiles normally come from the auth service
            for user_id in USER_IDS:
                await uow.session.merge(UserModel(id=user_id, is_active=True, last_seen_at=now))

            drafts = [
                Draft(
                    id=uuid.uuid4(),
                    sender_id=sender,
                    receiver_id=receiver,
                    content=phrases.generate(),
                    send_at=now - timedelta(minutes=1),
                    queued=False,
                    queued_at=None,
                    sent=False,
                    sent_at=None,
                    created_at=now,
                )
                for sender, receiver in zip(USER_IDS[::2], USER_IDS[1::2])
            ]
            await uow.drafts_w.bulk_create(drafts)
            await uow.commit()
            logger.info("Seeded %d users and %d due drafts", len(USER_IDS), len(drafts))
    finally:
        await engine.dispose()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
