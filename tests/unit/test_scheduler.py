"""
Unit tests for the asyncio interval scheduler.

These use short real intervals on the test's event loop.
"""

import asyncio
import logging

import pytest

from api_token_core.utils.scheduler import AsyncioIntervalScheduler, AsyncioPeriodicJob


class TestAsyncioIntervalScheduler:
    """Test AsyncioIntervalScheduler."""

    @pytest.mark.parametrize("interval", [0, -5])
    async def test_rejects_non_positive_interval(self, interval):
        async def callback():
            pass

        with pytest.raises(ValueError):
            AsyncioIntervalScheduler().schedule(interval, callback, name="bad")

    async def test_runs_until_cancelled(self):
        """Test the callback repeats and stops after cancel."""
        calls = []

        async def callback():
            calls.append(1)

        job = AsyncioIntervalScheduler().schedule(0.01, callback, name="counter")
        assert isinstance(job, AsyncioPeriodicJob)

        await asyncio.sleep(0.1)
        job.cancel()
        runs = len(calls)
        await asyncio.sleep(0.05)

        assert runs >= 2
        assert len(calls) == runs
        assert job.cancelled

    async def test_hung_run_does_not_block_ticks(self):
        """Test a run that never finishes does not stop later ticks."""
        started = []
        never = asyncio.Event()

        async def callback():
            started.append(1)
            await never.wait()

        job = AsyncioIntervalScheduler().schedule(0.01, callback, name="hung")
        await asyncio.sleep(0.1)

        assert len(started) >= 2
        assert job.in_flight >= 2

        job.cancel()
        await asyncio.sleep(0.01)

        assert job.in_flight == 0

    async def test_failed_run_is_logged(self, caplog):
        """Test an exception in one run is logged and ticks continue."""
        calls = []

        async def callback():
            calls.append(1)
            raise RuntimeError("refresh exploded")

        with caplog.at_level(logging.ERROR):
            job = AsyncioIntervalScheduler().schedule(0.01, callback, name="failing")
            await asyncio.sleep(0.1)
            job.cancel()

        assert len(calls) >= 2
        assert "Scheduled job run failed" in caplog.text
        assert "job=failing" in caplog.text

    async def test_cancel_is_idempotent(self):
        async def callback():
            pass

        job = AsyncioIntervalScheduler().schedule(60, callback, name="idle")

        job.cancel()
        job.cancel()

        assert job.cancelled
        assert job.in_flight == 0
