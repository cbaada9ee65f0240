from __future__ import annotations

import logging

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class RedisPresenceStore:
    """Presence kept in a Redis set, shared by every process on the same Redis."""

    def __init__(self, redis: aioredis.Redis, key: str = "online_users") -> None:
        self._redis = redis
        self._key = key

    async def add(self, user_id: int) -> None:
        await self._redis.sadd(self._key, str(user_id))
        logger.debug("User %s is now online", user_id)

    async def remove(self, user_id: int) -> None:
        await self._redis.srem(self._key, str(user_id))
        logger.debug("User %s is now offline", user_id)

    async def contains(self, user_id: int) -> bool:
        return bool(await self._redis.sismember(self._key, str(user_id)))

    async def count(self) -> int:
        return int(await self._redis.scard(self._key))

    async def members(self) -> set[int]:
        raw = await self._redis.smembers(self._key)
        return {int(v) for v in raw}
