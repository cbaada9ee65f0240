"""Durable draft queue on a Redis Stream with a consumer group."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import redis.asyncio as aioredis

from pairchat.application.ports.queue import QueueDelivery
from pairchat.infrastructure.bus.serializer import (
    MalformedReference,
    deserialize_reference,
    parse_attempt,
    to_fields,
)

logger = logging.getLogger(__name__)


class RedisStreamDraftQueue:
    """Implements application.ports.queue.DraftQueue.

    Reads one entry at a time (prefetch 1). Entries stay in the group's
    pending list until acknowledged. Every receive first re-reads this
    consumer's own pending entries, so work left unacknowledged by a crash
    or a failed ack is picked up again before anything new.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        stream: str,
        group: str,
        consumer: str,
        *,
        dead_letter_stream: str,
        block_ms: int = 5000,
    ) -> None:
        self._redis = redis
        self._stream = stream
        self._group = group
        self._consumer = consumer
        self._dead_letter_stream = dead_letter_stream
        self._block_ms = block_ms

    async def ensure_group(self) -> None:
        try:
            # id="0": entries published before the group existed are still delivered
            await self._redis.xgroup_create(
                self._stream, self._group, id="0", mkstream=True
            )
            logger.info("Created consumer group %s on %s", self._group, self._stream)
        except aioredis.ResponseError as e:
            if "BUSYGROUP" in str(e):
                logger.debug("Consumer group %s already exists", self._group)
            else:
                raise

    async def publish(self, draft_id: UUID) -> None:
        entry_id = await self._redis.xadd(self._stream, to_fields(draft_id, 0))
        logger.debug("Queued draft %s as %s", draft_id, entry_id)

    async def receive(self) -> QueueDelivery | None:
        while True:
            # Own pending entries first, then new ones
            entry = await self._read("0", block=None)
            if entry is None:
                entry = await self._read(">", block=self._block_ms)
            if entry is None:
                return None

            entry_id, fields = entry
            if not fields:
                # Trimmed or deleted while pending; nothing left to process
                await self._redis.xack(self._stream, self._group, entry_id)
                continue
            try:
                draft_id = deserialize_reference(fields.get("payload", ""))
            except MalformedReference as exc:
                logger.error("Dropping malformed queue entry %s: %s", entry_id, exc)
                await self._move_to_dead_letter(entry_id, fields, str(exc))
                continue
            return QueueDelivery(
                delivery_id=entry_id,
                draft_id=draft_id,
                attempt=parse_attempt(fields),
            )

    async def ack(self, delivery: QueueDelivery) -> None:
        await self._redis.xack(self._stream, self._group, delivery.delivery_id)

    async def retry(self, delivery: QueueDelivery) -> None:
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.xadd(self._stream, to_fields(delivery.draft_id, delivery.attempt + 1))
            pipe.xack(self._stream, self._group, delivery.delivery_id)
            await pipe.execute()

    async def dead_letter(self, delivery: QueueDelivery, reason: str) -> None:
        await self._move_to_dead_letter(
            delivery.delivery_id,
            to_fields(delivery.draft_id, delivery.attempt),
            reason,
        )

    async def _move_to_dead_letter(
        self,
        entry_id: str,
        fields: dict[str, Any],
        reason: str,
    ) -> None:
        record = {
            **fields,
            "source_id": entry_id,
            "reason": reason[:500],
            "failed_at": datetime.now(timezone.utc).isoformat(),
        }
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.xadd(self._dead_letter_stream, record)
            pipe.xack(self._stream, self._group, entry_id)
            await pipe.execute()

    async def _read(
        self,
        start_id: str,
        *,
        block: int | None,
    ) -> tuple[str, dict[str, str]] | None:
        entries = await self._redis.xreadgroup(
            groupname=self._group,
            consumername=self._consumer,
            streams={self._stream: start_id},
            count=1,
            block=block,
        )
        for _stream_name, messages in entries or []:
            for entry_id, fields in messages:
                return entry_id, fields
        return None
