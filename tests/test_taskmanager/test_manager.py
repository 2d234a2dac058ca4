"""Tests for the cron task manager."""

from __future__ import annotations

import asyncio

import pytest

from addrindex.metrics.collector import ExplorerMetrics
from addrindex.taskmanager.manager import CronJob, TaskManager


class Counter:
    def __init__(self, fail: bool = False) -> None:
        self.runs = 0
        self.fail = fail

    async def __call__(self) -> None:
        self.runs += 1
        if self.fail:
            raise RuntimeError("job failed")


class TestTaskManager:
    async def test_runs_periodically(self) -> None:
        job = Counter()
        tm = TaskManager()
        tm.register("tick", CronJob(handler=job, period=0.01))
        await tm.start()
        await asyncio.sleep(0.1)
        await tm.stop()
        assert job.runs >= 2
        assert tm.is_running is False

    async def test_failures_do_not_stop_the_loop(self) -> None:
        job = Counter(fail=True)
        tm = TaskManager()
        tm.register("flaky", CronJob(handler=job, period=0.01))
        await tm.start()
        await asyncio.sleep(0.1)
        await tm.stop()
        assert job.runs >= 2

    async def test_failure_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        tm = TaskManager()
        tm.register("refresh_prices", CronJob(handler=Counter(fail=True), period=0.01))
        await tm.start()
        await asyncio.sleep(0.05)
        await tm.stop()
        assert "Refresh job 'refresh_prices' failed" in caplog.text

    async def test_register_sets_name(self) -> None:
        tm = TaskManager()
        tm.register("prices", CronJob(handler=Counter(), period=60))
        assert tm.jobs["prices"].name == "prices"

    async def test_register_while_running_replaces(self) -> None:
        first, second = Counter(), Counter()
        tm = TaskManager()
        await tm.start()
        tm.register("job", CronJob(handler=first, period=60))
        tm.register("job", CronJob(handler=second, period=0.01))
        await asyncio.sleep(0.1)
        await tm.stop()
        assert first.runs == 0
        assert second.runs >= 1

    async def test_start_and_stop_are_idempotent(self) -> None:
        tm = TaskManager()
        await tm.start()
        await tm.start()
        await tm.stop()
        await tm.stop()
        assert tm.is_running is False

    async def test_run_once(self) -> None:
        job = Counter()
        tm = TaskManager()
        tm.register("job", CronJob(handler=job, period=3600))
        await tm.run_once("job")
        assert job.runs == 1

    async def test_run_once_unknown(self) -> None:
        with pytest.raises(KeyError):
            await TaskManager().run_once("missing")

    async def test_metrics(self) -> None:
        metrics = ExplorerMetrics()
        tm = TaskManager(metrics=metrics)
        tm.register("refresh_blocks", CronJob(handler=Counter(), period=3600))
        await tm.run_once("refresh_blocks")
        count = metrics.registry.get_sample_value(
            "addrindex_cron_histogram_count", {"job_name": "refresh_blocks"}
        )
        assert count == 1.0
