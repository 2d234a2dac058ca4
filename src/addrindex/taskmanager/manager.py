"""Background refresh jobs of the explorer.

The engine registers two jobs here: ``refresh_blocks`` rebuilds the recent
blocks snapshot behind ``/blocks`` and ``refresh_prices`` polls the price
providers behind ``/currency``. Each job runs on its own asyncio task, waits
``period`` seconds between runs and writes only into its own lock-guarded
snapshot, so a slow node or price provider delays nothing but that job. A
failed run leaves the previous snapshot in place and is retried next period.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import nullcontext
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from addrindex.metrics.collector import ExplorerMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CronJob:
    """A snapshot refresh run every ``period`` seconds.

    ``name`` is filled in by :meth:`TaskManager.register` and labels the
    job's log lines and cron metrics.
    """

    handler: Callable[[], Awaitable[None]]
    period: float
    name: str = ""


class TaskManager:
    """Runs the explorer's refresh jobs for the lifetime of the engine.

    Usage::

        tasks = TaskManager(metrics=explorer_metrics)
        tasks.register("refresh_blocks", CronJob(handler=blocks.refresh, period=60))
        await tasks.start()
        await tasks.run_once("refresh_blocks")  # warm the snapshot now
        ...
        await tasks.stop()
    """

    def __init__(self, *, metrics: ExplorerMetrics | None = None) -> None:
        self._jobs: dict[str, CronJob] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._running = False
        self._metrics = metrics

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def jobs(self) -> dict[str, CronJob]:
        """Copy of the registered jobs, keyed by name."""
        return dict(self._jobs)

    def register(self, name: str, job: CronJob) -> None:
        """Add *job* under *name*, replacing any job already registered there.

        A job registered while the manager runs is scheduled at once; the task
        of the job it replaces is cancelled.
        """
        job = CronJob(handler=job.handler, period=job.period, name=name)
        self._jobs[name] = job
        if not self._running:
            return
        replaced = self._tasks.pop(name, None)
        if replaced is not None:
            replaced.cancel()
        self._schedule(job)

    async def start(self) -> None:
        """Schedule every registered job; a second call does nothing."""
        if self._running:
            return
        self._running = True
        for job in self._jobs.values():
            self._schedule(job)
        logger.info("Started %d refresh jobs: %s", len(self._jobs), ", ".join(self._jobs))

    async def stop(self) -> None:
        """Cancel every job and wait until their tasks have finished."""
        if not self._running:
            return
        self._running = False
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        for outcome in await asyncio.gather(*tasks, return_exceptions=True):
            if isinstance(outcome, Exception) and not isinstance(outcome, asyncio.CancelledError):
                logger.error("Refresh job failed during shutdown: %s", outcome)
        logger.info("Refresh jobs stopped")

    async def run_once(self, name: str) -> None:
        """Refresh *name* now, outside its schedule (e.g. to warm a snapshot).

        Raises:
            KeyError: If no job with that name is registered.
        """
        await self._execute(self._jobs[name])

    def _schedule(self, job: CronJob) -> None:
        self._tasks[job.name] = asyncio.create_task(self._every_period(job))

    async def _every_period(self, job: CronJob) -> None:
        while True:
            await asyncio.sleep(job.period)
            if not self._running:
                return
            try:
                await self._execute(job)
            except Exception:
                logger.exception("Refresh job %r failed; keeping the previous snapshot", job.name)

    async def _execute(self, job: CronJob) -> None:
        tracker = self._metrics.track_cron(job.name) if self._metrics else nullcontext()
        with tracker:
            await job.handler()
