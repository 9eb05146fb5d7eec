"""
Interval scheduling for background refresh jobs.

The scheduler is injected into components that refresh state periodically,
so tests can substitute a manual scheduler and trigger runs deterministically.
The default implementation runs jobs on APScheduler's AsyncIOScheduler.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Set

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .logger import get_logger

AsyncCallback = Callable[[], Awaitable[None]]

# Runs of one job allowed at once; further ticks are skipped by APScheduler
MAX_OVERLAPPING_RUNS = 100


class ScheduledJob(ABC):
    """Handle for a scheduled periodic job."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop future runs and cancel in-flight ones."""

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        """Whether cancel() has been called."""


class IntervalScheduler(ABC):
    """Runs an async callback every ``interval`` seconds."""

    @abstractmethod
    def schedule(self, interval: float, callback: AsyncCallback, name: str) -> ScheduledJob:
        """Start running ``callback`` periodically and return a handle to stop it."""


class AsyncioPeriodicJob(ScheduledJob):
    """
    Periodic job backed by its own AsyncIOScheduler.

    Every tick runs the callback as a separate task on the running loop and
    overlapping runs are allowed, so a run that hangs does not delay the next
    tick. Failed runs are logged; they never stop the schedule.
    """

    def __init__(self, interval: float, callback: AsyncCallback, name: str):
        self.interval = interval
        self.name = name
        self._callback = callback
        self._runs: Set[asyncio.Task] = set()
        self._cancelled = False

        self._scheduler = AsyncIOScheduler(timezone="UTC")
        self._scheduler.start()
        self._scheduler.add_job(
            self._run,
            trigger=IntervalTrigger(seconds=interval),
            name=name,
            coalesce=True,
            max_instances=MAX_OVERLAPPING_RUNS,
            misfire_grace_time=None,
        )

    async def _run(self) -> None:
        run = asyncio.current_task()
        self._runs.add(run)
        try:
            await self._callback()
        except asyncio.CancelledError:
            # Only cancel() cancels runs; the job is already stopped
            return
        except Exception as e:
            get_logger().error(
                "Scheduled job run failed",
                extra={"job": self.name, "error": str(e), "error_type": type(e).__name__},
                exc_info=e,
            )
        finally:
            self._runs.discard(run)

    @property
    def in_flight(self) -> int:
        """Number of runs that have started and not yet finished."""
        return len(self._runs)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        for run in list(self._runs):
            run.cancel()


class AsyncioIntervalScheduler(IntervalScheduler):
    """Default scheduler; must be used from a coroutine on the running event loop."""

    def schedule(self, interval: float, callback: AsyncCallback, name: str) -> ScheduledJob:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        return AsyncioPeriodicJob(interval, callback, name)
