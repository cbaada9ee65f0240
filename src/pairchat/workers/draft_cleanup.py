"""Retention sweep for drafts that were delivered long ago."""
from __future__ import annotations

import logging
from datetime import timedelta

from pairchat.application.ports.clock import Clock
from pairchat.application.uow import UoWFactory
from pairchat.workers.periodic import PeriodicWorker, Schedule

logger = logging.getLogger(__name__)


class DraftCleanup(PeriodicWorker):
    name = "draft-cleanup"

    def __init__(
        self,
        uow_factory: UoWFactory,
        schedule: Schedule,
        *,
        retention: timedelta = timedelta(days=7),
        clock: Clock | None = None,
    ) -> None:
        super().__init__(schedule, clock=clock)
        self._uow_factory = uow_factory
        self._retention = retention

    async def run_once(self) -> int:
        cutoff = self._clock.now() - self._retention
        async with self._uow_factory() as uow:
            deleted = await uow.drafts_w.delete_sent_before(cutoff)
            await uow.commit()
        logger.info("Cleaned up %d sent drafts older than %s", deleted, cutoff.isoformat())
        return deleted
