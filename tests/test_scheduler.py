from __future__ import annotations

import asyncio
import sys
import unittest
from pathlib import Path
from unittest import mock

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from pingbot.scheduler import ARMED, DISARMED, AlarmScheduler


class AlarmSchedulerTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.runs = 0

    async def _job(self) -> None:
        self.runs += 1

    async def _failing_job(self) -> None:
        self.runs += 1
        raise RuntimeError("job exploded")

    async def test_starts_disarmed(self) -> None:
        scheduler = AlarmScheduler(self._job)

        self.assertEqual(DISARMED, scheduler.state)
        self.assertIsNone(scheduler.next_fire_ms)

    async def test_init_twice_keeps_single_timer(self) -> None:
        scheduler = AlarmScheduler(self._job, period_seconds=30)

        first = await scheduler.init(True)
        handle = scheduler._handle
        second = await scheduler.init(True)

        self.assertEqual(ARMED, scheduler.state)
        self.assertIs(handle, scheduler._handle)
        self.assertEqual(first, second)
        await scheduler.shutdown()

    async def test_double_init_fires_once_per_period(self) -> None:
        scheduler = AlarmScheduler(self._job, period_seconds=0.2)

        await scheduler.init(True)
        await scheduler.init(True)
        await asyncio.sleep(0.3)
        await scheduler.shutdown()

        self.assertEqual(1, self.runs)

    async def test_disable_cancels_timer(self) -> None:
        scheduler = AlarmScheduler(self._job, period_seconds=0.05)

        await scheduler.init(True)
        result = await scheduler.init(False)
        await asyncio.sleep(0.1)

        self.assertIsNone(result)
        self.assertEqual(DISARMED, scheduler.state)
        self.assertEqual(0, self.runs)
        self.assertIsNone(await scheduler.init(False))

    async def test_tick_rearms_after_job_failure(self) -> None:
        scheduler = AlarmScheduler(self._failing_job, period_seconds=30)
        await scheduler.init(True)
        handle = scheduler._handle

        await scheduler.tick()

        self.assertEqual(1, self.runs)
        self.assertEqual(ARMED, scheduler.state)
        self.assertIsNotNone(scheduler._handle)
        self.assertIsNot(handle, scheduler._handle)
        await scheduler.shutdown()

    async def test_repeats_on_its_own(self) -> None:
        scheduler = AlarmScheduler(self._failing_job, period_seconds=0.03)

        await scheduler.init(True)
        await asyncio.sleep(0.2)
        await scheduler.shutdown()

        self.assertGreaterEqual(self.runs, 2)

    async def test_rearm_failure_leaves_scheduler_disarmed(self) -> None:
        scheduler = AlarmScheduler(self._job, period_seconds=30)
        await scheduler.init(True)

        with mock.patch.object(scheduler, "_arm", side_effect=RuntimeError("no timer for you")):
            await scheduler.tick()

        self.assertEqual(DISARMED, scheduler.state)
        self.assertIsNone(scheduler.next_fire_ms)

        # The next init(True) recovers.
        await scheduler.init(True)
        self.assertEqual(ARMED, scheduler.state)
        await scheduler.shutdown()

    async def test_tick_while_disarmed_does_not_arm(self) -> None:
        scheduler = AlarmScheduler(self._job)

        await scheduler.tick()

        self.assertEqual(1, self.runs)
        self.assertEqual(DISARMED, scheduler.state)


if __name__ == "__main__":
    unittest.main()
