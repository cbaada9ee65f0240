"""Daily planner: pairs active users and schedules draft messages between them."""
from __future__ import annotations

import logging
import random
import uuid
from datetime import timedelta

from pairchat.application.policies.pairing import PairingStrategy
from pairchat.application.ports.clock import Clock
from pairchat.application.ports.content import ContentGenerator
from pairchat.application.uow import UoWFactory
from pairchat.domain.entities.draft import Draft
from pairchat.workers.periodic import PeriodicWorker, Schedule

logger = logging.getLogger(__name__)


class DraftPlanner(PeriodicWorker):
    name = "draft-planner"

    def __init__(
        self,
        uow_factory: UoWFactory,
        pairing: PairingStrategy,
        content: ContentGenerator,
        schedule: Schedule,
        *,
        active_window: timedelta = timedelta(days=30),
        send_window: timedelta = timedelta(hours=24),
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(schedule, clock=clock)
        self._uow_factory = uow_factory
        self._pairing = pairing
        self._content = content
        self._active_window = active_window
        self._send_window = send_window
        self._rng = rng or random.Random()

    async def run_once(self) -> int:
        logger.info("Starting message planning run")
        now = self._clock.now()

        async with self._uow_factory() as uow:
            users = await uow.users.list_active_since(now - self._active_window)
            if len(users) < 2:
                logger.info("Not enough active users for message planning (%d)", len(users))
                return 0

            pairs = self._pairing.pair([u.id for u in users])
            logger.info("Created %d user pairs from %d active users", len(pairs), len(users))

            window = self._send_window.total_seconds()
            drafts = [
                Draft(
                    id=uuid.uuid4(),
                    sender_id=pair.sender_id,
                    receiver_id=pair.receiver_id,
                    content=self._content.generate(),
                    send_at=now + timedelta(seconds=self._rng.uniform(0, window)),
                    queued=False,
                    queued_at=None,
                    sent=False,
                    sent_at=None,
                    created_at=now,
                )
                for pair in pairs
            ]
            created = await uow.drafts_w.bulk_create(drafts)
            await uow.commit()

        logger.info("Created %d drafts", created)
        return created
