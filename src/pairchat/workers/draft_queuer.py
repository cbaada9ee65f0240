"""Per-minute queuer: promotes due drafts onto the draft queue."""
from __future__ import annotations

import logging

from pairchat.application.ports.clock import Clock
from pairchat.application.ports.queue import DraftQueue
from pairchat.application.uow import UoWFactory
from pairchat.workers.periodic import PeriodicWorker, Schedule

logger = logging.getLogger(__name__)


class DraftQueuer(PeriodicWorker):
    """Claims at most `batch_size` due drafts per tick and publishes `{draftId}`.

    Claimed rows stay locked until the tick commits, so an overlapping tick
    skips them instead of publishing them twice. A draft whose publish fails
    is left unqueued for the next tick.
    """

    name = "draft-queuer"

    def __init__(
        self,
        uow_factory: UoWFactory,
        queue: DraftQueue,
        schedule: Schedule,
        *,
        batch_size: int = 100,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(schedule, clock=clock)
        self._uow_factory = uow_factory
        self._queue = queue
        self._batch_size = batch_size

    async def run_once(self) -> int:
        now = self._clock.now()

        async with self._uow_factory() as uow:
            claimed = await uow.drafts_w.claim_due(now, self._batch_size)
            if not claimed:
                logger.debug("No drafts due")
                return 0

            published = []
            for draft in claimed:
                try:
                    await self._queue.publish(draft.id)
                except Exception:
                    logger.exception("Failed to queue draft %s", draft.id)
                    continue
                published.append(draft.id)

            await uow.drafts_w.mark_queued(published, now)
            await uow.commit()

        logger.info("Queued %d of %d due drafts", len(published), len(claimed))
        return len(published)
