# tests/test_scheduler.py

"""Tests for the periodic refresh scheduler."""

import asyncio
import unittest
from datetime import datetime
from unittest.mock import MagicMock

from src.services.scheduler import RefreshScheduler
from src.storage.document_cache import RefreshOutcome


def _fake_cache(success: bool = True) -> MagicMock:
    cache = MagicMock()
    cache.refresh.return_value = RefreshOutcome(
        success=success, error=None if success else "down"
    )
    return cache


class TestRefreshScheduler(unittest.IsolatedAsyncioTestCase):
    """Scheduler loop behaviour."""

    async def _wait_for_calls(self, cache: MagicMock, count: int) -> None:
        for _ in range(200):
            if cache.refresh.call_count >= count:
                return
            await asyncio.sleep(0.01)
        self.fail(f"refresh called {cache.refresh.call_count} times")

    async def test_runs_refresh_repeatedly(self) -> None:
        cache = _fake_cache()
        scheduler = RefreshScheduler(cache, interval_minutes=0.0001)
        scheduler.start()
        self.assertTrue(scheduler.running)

        await self._wait_for_calls(cache, 2)
        await scheduler.stop()

        self.assertFalse(scheduler.running)
        cache.set_next_scheduled.assert_called_with(None)

    async def test_publishes_next_run_time(self) -> None:
        """The next run is announced before each sleep."""
        cache = _fake_cache()
        scheduler = RefreshScheduler(cache, interval_minutes=30)
        scheduler.start()
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        first_call = cache.set_next_scheduled.call_args_list[0]
        self.assertIsInstance(first_call.args[0], datetime)
        cache.refresh.assert_not_called()
        await scheduler.stop()

    async def test_failures_do_not_stop_the_loop(self) -> None:
        cache = _fake_cache(success=False)
        scheduler = RefreshScheduler(cache, interval_minutes=0.0001)
        scheduler.start()
        with self.assertLogs("catalog_feed.scheduler", level="WARNING"):
            await self._wait_for_calls(cache, 2)
        self.assertTrue(scheduler.running)
        await scheduler.stop()

    async def test_start_twice_keeps_single_task(self) -> None:
        cache = _fake_cache()
        scheduler = RefreshScheduler(cache, interval_minutes=30)
        scheduler.start()
        task = scheduler._task
        scheduler.start()
        self.assertIs(scheduler._task, task)
        await scheduler.stop()

    async def test_stop_without_start(self) -> None:
        scheduler = RefreshScheduler(_fake_cache(), interval_minutes=30)
        await scheduler.stop()
        self.assertFalse(scheduler.running)


if __name__ == "__main__":
    unittest.main()
