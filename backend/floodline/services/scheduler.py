"""
Sync Scheduler.

One supervisor owns every periodic reconciliation timer. Each timer is a
long-lived asyncio task that wakes on wall-clock multiples of its interval
(top of the hour for 3600s) and spawns the sync as a separate task, so a
slow run never delays its own timer or any other.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Set

import structlog

from floodline.core.config import settings
from floodline.services.gov_data_service import GovDataService

logger = structlog.get_logger()


@dataclass
class ScheduledJob:
    name: str
    interval: float  # seconds
    run: Callable[[], Awaitable[Any]]


# A wake-up this close before a boundary counts as that boundary's tick
TICK_SLACK_SECONDS = 1.0


def seconds_until_next_tick(interval: float, now: float) -> float:
    """
    Delay until the next multiple of `interval` since the epoch (UTC).

    asyncio sleeps on the monotonic clock and may wake slightly before the
    wall-clock boundary; that boundary is treated as already fired so one
    tick never spawns two runs.
    """
    slack = min(TICK_SLACK_SECONDS, interval / 10)
    remaining = interval - (now % interval)
    if remaining < slack:
        remaining += interval
    return remaining


class SyncScheduler:

    def __init__(self, jobs: List[ScheduledJob], clock: Callable[[], float] = time.time):
        self.jobs = list(jobs)
        self._clock = clock
        self._timers: List[asyncio.Task] = []
        self._runs: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return bool(self._timers)

    def start(self) -> None:
        if self._timers:
            return
        for job in self.jobs:
            self._timers.append(asyncio.create_task(self._timer(job), name=f"sync-timer-{job.name}"))
        logger.info(
            "scheduler_started",
            jobs={job.name: f"every {job.interval:g}s" for job in self.jobs},
        )

    async def stop(self) -> None:
        tasks = self._timers + list(self._runs)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._timers.clear()
        self._runs.clear()
        logger.info("scheduler_stopped")

    async def _timer(self, job: ScheduledJob) -> None:
        while True:
            await asyncio.sleep(seconds_until_next_tick(job.interval, self._clock()))
            self._spawn(job)

    def _spawn(self, job: ScheduledJob) -> None:
        task = asyncio.create_task(self._run_job(job), name=f"sync-run-{job.name}")
        self._runs.add(task)
        task.add_done_callback(self._runs.discard)

    async def _run_job(self, job: ScheduledJob) -> None:
        logger.info("scheduled_sync_tick", job=job.name)
        try:
            result = await job.run()
        except Exception as e:
            # Sync jobs summarize their own failures; this only guards the timer
            logger.error("scheduled_sync_crashed", job=job.name, error=str(e))
            return
        status = getattr(getattr(result, "status", None), "value", None)
        logger.info("scheduled_sync_done", job=job.name, status=status)


def build_default_scheduler(session_factory: Optional[Any] = None) -> SyncScheduler:
    return SyncScheduler([
        ScheduledJob(
            name="floods",
            interval=settings.FLOOD_SYNC_INTERVAL_SECONDS,
            run=lambda: GovDataService.sync_floods(session_factory),
        ),
        ScheduledJob(
            name="shelters",
            interval=settings.SHELTER_SYNC_INTERVAL_SECONDS,
            run=lambda: GovDataService.sync_shelters(session_factory),
        ),
    ])
