import asyncio

import pytest

from espn_scrape.jobs.base import SingleRunJob


class BlockingJob(SingleRunJob):
    name = "blocking"

    def __init__(self):
        super().__init__()
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0

    async def execute(self, **params):
        self.calls += 1
        self.started.set()
        await self.release.wait()
        return {"params": params}


class FailingJob(SingleRunJob):
    name = "failing"

    async def execute(self, **params):
        raise RuntimeError("ESPN is down")


class TestSingleRunJob:
    async def test_concurrent_trigger_is_skipped(self):
        job = BlockingJob()
        first = asyncio.create_task(job.run(season=2025))
        await job.started.wait()

        assert job.is_running
        assert await job.run(season=2025) is None

        job.release.set()
        assert await first == {"params": {"season": 2025}}
        assert job.calls == 1
        assert not job.is_running

    async def test_runs_again_after_completion(self):
        job = BlockingJob()
        job.release.set()
        await job.run()
        await job.run()
        assert job.calls == 2

    async def test_failure_is_reraised_and_releases_guard(self):
        job = FailingJob()
        with pytest.raises(RuntimeError, match="ESPN is down"):
            await job.run()
        assert not job.is_running

    async def test_execute_must_be_overridden(self):
        with pytest.raises(NotImplementedError):
            await SingleRunJob().run()
