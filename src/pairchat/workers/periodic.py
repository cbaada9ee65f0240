"""Schedules and a base class for in-process periodic workers."""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, time, timedelta, timezone
from typing import Protocol
from zoneinfo import ZoneInfo

from pairchat.application.ports.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class Schedule(Protocol):
    def seconds_until_next(self, now: datetime) -> float: ...


class Every:
    """Fixed interval between the end of one tick and the start of the next."""

    def __init__(self, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError("interval must be positive")
        self.seconds = seconds

    def seconds_until_next(self, now: datetime) -> float:
        return self.seconds


class DailyAt:
    """Once a day at a wall-clock time in the given time zone."""

    def __init__(self, hour: int, minute: int = 0, tz: str = "UTC") -> None:
        self.at = time(hour=hour, minute=minute)
        self.zone = ZoneInfo(tz)

    def next_run(self, now: datetime) -> datetime:
        local_now = now.astimezone(self.zone)
        candidate = self._at_on(local_now.date())
        if candidate <= local_now:
            candidate = self._at_on(local_now.date() + timedelta(days=1))
        return candidate

    def seconds_until_next(self, now: datetime) -> float:
        # Subtract in UTC; same-zone aware arithmetic ignores DST shifts.
        nxt = self.next_run(now).astimezone(timezone.utc)
        return max((nxt - now.astimezone(timezone.utc)).total_seconds(), 0.0)

    def _at_on(self, day: date) -> datetime:
        return datetime.combine(day, self.at, tzinfo=self.zone)


class PeriodicWorker(ABC):
    """Runs `run_once` on a schedule until stopped.

    A failing tick is logged and the next tick runs as scheduled; there is
    no backoff at this level.
    """

    name: str = "periodic-worker"

    def __init__(self, schedule: Schedule, *, clock: Clock | None = None) -> None:
        self._schedule = schedule
        self._clock = clock or SystemClock()
        self._task: asyncio.Task[None] | None = None

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    @abstractmethod
    async def run_once(self) -> int:
        """Do one tick of work. Returns the number of items handled."""

    async def start(self) -> None:
        self._task = asyncio.create_task(self._loop(), name=self.name)
        logger.info("%s started", self.name)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("%s stopped", self.name)

    async def _loop(self) -> None:
        while True:
            delay = self._schedule.seconds_until_next(self._clock.now())
            await asyncio.sleep(delay)
            try:
                await self.run_once()
            except Exception:
                logger.exception("%s tick failed", self.name)
