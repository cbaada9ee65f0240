"""Draft consumer: turns queued draft references into real messages."""
from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from pairchat.application.ports.clock import Clock, SystemClock
from pairchat.application.ports.notifier import MessageNotifier
from pairchat.application.ports.queue import DraftQueue, QueueDelivery
from pairchat.application.ports.search import MessageIndexer
from pairchat.application.uow import UoWFactory
from pairchat.domain.events.message_created import MessageCreated
from pairchat.services import message_service

logger = logging.getLogger(__name__)

RECEIVE_ERROR_DELAY_SECONDS = 5.0


class DraftConsumer:
    """Single sequential reader of the draft queue (one item in flight).

    Processing order is only globally consistent because exactly one of
    these runs; adding concurrent consumers gives up that ordering.

    A delivery that keeps failing is retried up to `max_attempts` times and
    then moved to the dead-letter stream, so it cannot block the items
    queued behind it.
    """

    name = "draft-consumer"

    def __init__(
        self,
        uow_factory: UoWFactory,
        queue: DraftQueue,
        notifier: MessageNotifier,
        *,
        indexer: MessageIndexer | None = None,
        max_attempts: int = 5,
        retry_delay: float = 2.0,
        clock: Clock | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._queue = queue
        self._notifier = notifier
        self._indexer = indexer
        self._max_attempts = max(max_attempts, 1)
        self._retry_delay = retry_delay
        self._clock = clock or SystemClock()
        self._task: asyncio.Task[None] | None = None

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    async def start(self) -> None:
        self._task = asyncio.create_task(self._consume(), name=self.name)
        logger.info("Draft consumer started (max_attempts=%d)", self._max_attempts)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Draft consumer stopped")

    async def handle(self, delivery: QueueDelivery) -> MessageCreated | None:
        """Process one delivery and settle it with the queue."""
        try:
            event = await self._process(delivery.draft_id)
        except Exception as exc:
            await self._settle_failure(delivery, exc)
            return None

        await self._queue.ack(delivery)
        return event

    async def _consume(self) -> None:
        while True:
            try:
                delivery = await self._queue.receive()
                if delivery is None:
                    continue
                await self.handle(delivery)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(
                    "Draft consumer error, retrying in %.0fs", RECEIVE_ERROR_DELAY_SECONDS,
                )
                await asyncio.sleep(RECEIVE_ERROR_DELAY_SECONDS)

    async def _process(self, draft_id: UUID) -> MessageCreated | None:
        logger.info("Processing draft %s", draft_id)

        async with self._uow_factory() as uow:
            draft = await uow.drafts.get_by_id(draft_id)
            if draft is None:
                logger.warning("Draft not found, skipping: %s", draft_id)
                return None
            if draft.sent:
                # Redelivered after an earlier successful run
                logger.info("Draft %s already sent, skipping", draft_id)
                return None

            now = self._clock.now()
            event = await message_service.append_message(
                draft.sender_id, draft.receiver_id, draft.content, uow, now=now,
            )
            await uow.drafts_w.mark_sent(draft.id, now)
            await uow.commit()

        await message_service.index_message(self._indexer, event.message)
        # Committed already; a failed push must not requeue the draft
        try:
            pushed = await self._notifier.deliver(event)
        except Exception:
            logger.exception("Realtime push failed for message %s", event.message.id)
            pushed = False
        logger.info(
            "Draft %s delivered as message %s (receiver %s %s)",
            draft_id,
            event.message.id,
            event.receiver_id,
            "online" if pushed else "offline",
        )
        return event

    async def _settle_failure(self, delivery: QueueDelivery, exc: Exception) -> None:
        attempt = delivery.attempt + 1
        if attempt >= self._max_attempts:
            logger.error(
                "Draft %s failed %d times, moving to dead letter: %r",
                delivery.draft_id, attempt, exc,
            )
            await self._queue.dead_letter(delivery, repr(exc))
            return

        logger.warning(
            "Draft %s failed (attempt %d/%d), requeueing: %r",
            delivery.draft_id, attempt, self._max_attempts, exc,
            exc_info=exc,
        )
        await asyncio.sleep(self._retry_delay)
        await self._queue.retry(delivery)
