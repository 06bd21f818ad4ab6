import asyncio
import unittest
from unittest.mock import AsyncMock, patch

from floodline.core.config import settings
from floodline.services.gov_data_service import GovDataService
from floodline.services.scheduler import (
    ScheduledJob,
    SyncScheduler,
    build_default_scheduler,
    seconds_until_next_tick,
)


class TestTickAlignment(unittest.TestCase):

    def test_waits_until_top_of_the_hour(self):
        # 10:15:00 UTC on some day
        now = 1_700_000_000 - (1_700_000_000 % 3600) + 15 * 60
        self.assertEqual(seconds_until_next_tick(3600, now), 45 * 60)

    def test_on_boundary_waits_a_full_interval(self):
        self.assertEqual(seconds_until_next_tick(7200, 7200 * 10), 7200)

    def test_early_wake_skips_to_following_tick(self):
        # Woke 0.1 ms before the top of the hour: that tick has already fired
        now = 3600 * 100 - 0.0001
        delay = seconds_until_next_tick(3600, now)
        self.assertAlmostEqual(delay, 3600.0001, places=3)

    def test_just_outside_slack_waits_for_boundary(self):
        now = 3600 * 100 - 2
        self.assertAlmostEqual(seconds_until_next_tick(3600, now), 2, places=6)

    def test_two_hour_ticks_land_on_even_hours(self):
        now = 7200 * 5 + 3600 + 30
        self.assertEqual(now + seconds_until_next_tick(7200, now), 7200 * 6)


class TestSyncScheduler(unittest.IsolatedAsyncioTestCase):

    async def test_runs_job_on_each_tick(self):
        ran = asyncio.Event()
        calls = []

        async def job():
            calls.append(1)
            if len(calls) >= 2:
                ran.set()

        scheduler = SyncScheduler([ScheduledJob("floods", 0.02, job)])
        scheduler.start()
        self.assertTrue(scheduler.running)
        try:
            await asyncio.wait_for(ran.wait(), timeout=2)
        finally:
            await scheduler.stop()

        self.assertFalse(scheduler.running)
        self.assertGreaterEqual(len(calls), 2)

    async def test_crashing_job_does_not_stop_timers(self):
        healthy = asyncio.Event()
        crashes = []

        async def broken():
            crashes.append(1)
            raise RuntimeError("boom")

        async def fine():
            if crashes:
                healthy.set()

        scheduler = SyncScheduler([
            ScheduledJob("floods", 0.02, broken),
            ScheduledJob("shelters", 0.03, fine),
        ])
        scheduler.start()
        try:
            await asyncio.wait_for(healthy.wait(), timeout=2)
        finally:
            await scheduler.stop()

        self.assertTrue(crashes)

    async def test_slow_run_does_not_delay_next_tick(self):
        started = []
        release = asyncio.Event()

        async def slow():
            started.append(1)
            await release.wait()

        scheduler = SyncScheduler([ScheduledJob("floods", 0.02, slow)])
        scheduler.start()
        try:
            for _ in range(100):
                if len(started) >= 3:
                    break
                await asyncio.sleep(0.02)
        finally:
            release.set()
            await scheduler.stop()

        self.assertGreaterEqual(len(started), 3)

    async def test_start_is_idempotent_and_stop_cancels_in_flight_runs(self):
        started = asyncio.Event()
        cancelled = asyncio.Event()

        async def hang():
            started.set()
            try:
                await asyncio.sleep(60)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        scheduler = SyncScheduler([ScheduledJob("floods", 0.01, hang)])
        scheduler.start()
        scheduler.start()
        self.assertEqual(len(scheduler._timers), 1)

        await asyncio.wait_for(started.wait(), timeout=2)
        await scheduler.stop()
        self.assertTrue(cancelled.is_set())


class TestDefaultScheduler(unittest.IsolatedAsyncioTestCase):

    async def test_jobs_follow_settings(self):
        scheduler = build_default_scheduler()
        intervals = {job.name: job.interval for job in scheduler.jobs}
        self.assertEqual(intervals, {
            "floods": settings.FLOOD_SYNC_INTERVAL_SECONDS,
            "shelters": settings.SHELTER_SYNC_INTERVAL_SECONDS,
        })
        self.assertEqual(settings.FLOOD_SYNC_INTERVAL_SECONDS, 3600)
        self.assertEqual(settings.SHELTER_SYNC_INTERVAL_SECONDS, 7200)

    async def test_jobs_call_the_reconciliation_engine(self):
        factory = object()
        scheduler = build_default_scheduler(factory)
        jobs = {job.name: job for job in scheduler.jobs}

        with patch.object(GovDataService, "sync_floods", new_callable=AsyncMock) as floods, \
                patch.object(GovDataService, "sync_shelters", new_callable=AsyncMock) as shelters:
            await jobs["floods"].run()
            await jobs["shelters"].run()

        floods.assert_awaited_once_with(factory)
        shelters.assert_awaited_once_with(factory)


if __name__ == "__main__":
    unittest.main()
