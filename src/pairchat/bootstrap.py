"""Composition root: builds every component and owns their lifecycle."""
from __future__ import annotations

import asyncio
import logging
import os
import signal
import socket
from datetime import timedelta

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from sqlalchemy.ext.asyncio import AsyncEngine

from pairchat.application.policies.pairing import build_pairing
from pairchat.application.ports.auth import TokenVerifier
from pairchat.application.ports.clock import Clock, SystemClock
from pairchat.application.ports.presence import PresenceStore
from pairchat.application.ports.queue import DraftQueue
from pairchat.application.ports.search import MessageIndexer, NullIndexer
from pairchat.application.uow import UoWFactory
from pairchat.config import Settings
from pairchat.infrastructure.auth.factory import build_verifier
from pairchat.infrastructure.bus.redis_streams import RedisStreamDraftQueue
from pairchat.infrastructure.content.phrases import RandomPhraseGenerator
from pairchat.infrastructure.db.session import build_engine, build_session_factory
from pairchat.infrastructure.db.uow import sqlalchemy_uow_factory
from pairchat.infrastructure.presence.memory import InMemoryPresenceStore
from pairchat.infrastructure.presence.redis_set import RedisPresenceStore
from pairchat.infrastructure.ws.gateway import RealtimeGateway
from pairchat.infrastructure.ws.manager import ConnectionManager
from pairchat.workers.draft_cleanup import DraftCleanup
from pairchat.workers.draft_consumer import DraftConsumer
from pairchat.workers.draft_planner import DraftPlanner
from pairchat.workers.draft_queuer import DraftQueuer
from pairchat.workers.periodic import DailyAt, Every

logger = logging.getLogger(__name__)


def consumer_name(settings: Settings) -> str:
    # Stable per host so pending entries are reclaimed after a restart
    return settings.DRAFT_CONSUMER_NAME or f"{socket.gethostname()}-drafts"


def build_presence(settings: Settings, redis: aioredis.Redis) -> PresenceStore:
    if settings.PRESENCE_BACKEND == "memory":
        return InMemoryPresenceStore()
    return RedisPresenceStore(redis, settings.PRESENCE_KEY)


class Container:
    """Holds the process-wide components.

    Construction does no I/O; `start` connects and launches the background
    workers, `stop` tears everything down in reverse order. Collaborators can
    be passed in to replace the default adapters.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        redis: aioredis.Redis | None = None,
        uow_factory: UoWFactory | None = None,
        presence: PresenceStore | None = None,
        queue: DraftQueue | None = None,
        verifier: TokenVerifier | None = None,
        indexer: MessageIndexer | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.settings = settings
        self.clock = clock or SystemClock()

        self.engine: AsyncEngine | None = None
        if uow_factory is None:
            self.engine = build_engine(settings)
            uow_factory = sqlalchemy_uow_factory(build_session_factory(self.engine))
        self.uow_factory: UoWFactory = uow_factory

        self.redis = redis or aioredis.from_url(settings.REDIS_URL, decode_responses=True)
        self.presence = presence or build_presence(settings, self.redis)
        self.queue = queue or RedisStreamDraftQueue(
            self.redis,
            settings.DRAFT_QUEUE_STREAM,
            settings.DRAFT_QUEUE_GROUP,
            consumer_name(settings),
            dead_letter_stream=settings.DRAFT_DEAD_LETTER_STREAM,
            block_ms=settings.DRAFT_CONSUMER_BLOCK_MS,
        )
        self.verifier = verifier or build_verifier(settings)
        self.indexer = indexer or NullIndexer()

        self.gateway = RealtimeGateway(
            ConnectionManager(),
            self.presence,
            self.uow_factory,
            indexer=self.indexer,
            heartbeat_seconds=settings.WS_HEARTBEAT_SECONDS,
        )

        tz = settings.SCHEDULER_TIMEZONE
        self.planner = DraftPlanner(
            self.uow_factory,
            build_pairing(settings.PLANNER_PAIRING),
            RandomPhraseGenerator(),
            DailyAt(settings.PLANNER_HOUR, settings.PLANNER_MINUTE, tz),
            active_window=timedelta(days=settings.PLANNER_ACTIVE_WINDOW_DAYS),
            send_window=timedelta(hours=settings.PLANNER_SEND_WINDOW_HOURS),
            clock=self.clock,
        )
        self.queuer = DraftQueuer(
            self.uow_factory,
            self.queue,
            Every(settings.QUEUER_INTERVAL_SECONDS),
            batch_size=settings.QUEUER_BATCH_SIZE,
            clock=self.clock,
        )
        self.cleanup = DraftCleanup(
            self.uow_factory,
            DailyAt(settings.CLEANUP_HOUR, settings.CLEANUP_MINUTE, tz),
            retention=timedelta(days=settings.CLEANUP_RETENTION_DAYS),
            clock=self.clock,
        )
        self.consumer = DraftConsumer(
            self.uow_factory,
            self.queue,
            self.gateway,
            indexer=self.indexer,
            max_attempts=settings.DRAFT_MAX_ATTEMPTS,
            retry_delay=settings.DRAFT_RETRY_DELAY_SECONDS,
            clock=self.clock,
        )
        self._started: list[DraftPlanner | DraftQueuer | DraftCleanup | DraftConsumer] = []

    async def start(self) -> None:
        await self._wait_for_redis()
        if not self.settings.WORKERS_ENABLED:
            logger.info("Background workers disabled")
            return

        if isinstance(self.queue, RedisStreamDraftQueue):
            await self.queue.ensure_group()
        for worker in (self.consumer, self.queuer, self.planner, self.cleanup):
            await worker.start()
            assert worker.task is not None
            worker.task.add_done_callback(self._on_worker_done)
            self._started.append(worker)

    async def stop(self) -> None:
        while self._started:
            await self._started.pop().stop()
        await self.gateway.shutdown()
        await self.redis.aclose()
        logger.info("Redis connection pool closed")
        if self.engine is not None:
            await self.engine.dispose()

    async def _wait_for_redis(self) -> None:
        attempts = self.settings.REDIS_CONNECT_ATTEMPTS
        for attempt in range(1, attempts + 1):
            try:
                await self.redis.ping()
                logger.info("Redis connected")
                return
            except (RedisConnectionError, RedisTimeoutError, OSError) as exc:
                logger.warning(
                    "Redis connection failed (attempt %d/%d): %s", attempt, attempts, exc,
                )
                if attempt == attempts:
                    raise
                await asyncio.sleep(self.settings.REDIS_CONNECT_DELAY_SECONDS)

    def _on_worker_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        logger.critical(
            "Background task %s exited unexpectedly, terminating", task.get_name(),
            exc_info=exc,
        )
        os.kill(os.getpid(), signal.SIGTERM)
