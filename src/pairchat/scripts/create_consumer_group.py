"""One-time script: create the Redis Streams consumer group for the draft queue.

The API process does this on startup as well; run it when the workers are
disabled or before the first deploy.
"""
from __future__ import annotations

import asyncio
import logging

import redis.asyncio as aioredis

from pairchat.bootstrap import consumer_name
from pairchat.config import settings
from pairchat.infrastructure.bus.redis_streams import RedisStreamDraftQueue

logger = logging.getLogger(__name__)


async def create_group() -> None:
    r = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    queue = RedisStreamDraftQueue(
        r,
        settings.DRAFT_QUEUE_STREAM,
        settings.DRAFT_QUEUE_GROUP,
        consumer_name(settings),
        dead_letter_stream=settings.DRAFT_DEAD_LETTER_STREAM,
    )
    try:
        await queue.ensure_group()
        logger.info(
            "Consumer group '%s' ready on stream '%s'",
            settings.DRAFT_QUEUE_GROUP,
            settings.DRAFT_QUEUE_STREAM,
        )
    finally:
        await r.aclose()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(create_group())


if __name__ == "__main__":
    main()
