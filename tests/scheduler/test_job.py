"""PeriodicJob 测试

测试内容：
1. 单飞守卫：上一次 tick 未结束时跳过
2. 超时：放弃等待并释放守卫，工作继续运行
3. 异常在 tick 边界记录，不向外传播
4. 定时器启动/停止
"""

import asyncio

from levelup.scheduler.job import PeriodicJob


class TestSingleFlight:
    async def test_overlapping_tick_skipped(self):
        release = asyncio.Event()
        calls = 0

        async def work():
            nonlocal calls
            calls += 1
            await release.wait()

        job = PeriodicJob("slow", work, interval_s=60, timeout_s=5)
        first = asyncio.create_task(job.tick())
        await asyncio.sleep(0)
        assert job.in_flight is True

        assert await job.tick() is False
        assert job.status.skipped == 1

        release.set()
        assert await first is True
        assert calls == 1
        assert job.in_flight is False
        assert job.status.runs == 1

    async def test_sequential_ticks_both_run(self):
        calls = 0

        async def work():
            nonlocal calls
            calls += 1

        job = PeriodicJob("fast", work, interval_s=60, timeout_s=5)
        assert await job.tick() is True
        assert await job.tick() is True
        assert calls == 2
        assert job.status.last_error is None


class TestTimeout:
    async def test_timeout_releases_guard(self):
        finished = asyncio.Event()

        async def work():
            await asyncio.sleep(0.2)
            finished.set()

        job = PeriodicJob("stuck", work, interval_s=60, timeout_s=0.05)

        assert await job.tick() is True
        assert job.status.timeouts == 1
        assert "stuck" in job.status.last_error
        assert job.in_flight is False

        # 被放弃的工作没有被取消，仍会完成
        await asyncio.wait_for(finished.wait(), timeout=1)

    async def test_next_tick_runs_after_timeout(self):
        durations = [0.2, 0]

        async def work():
            await asyncio.sleep(durations.pop(0))

        job = PeriodicJob("stuck", work, interval_s=60, timeout_s=0.05)
        await job.tick()
        assert await job.tick() is True
        assert job.status.timeouts == 1
        assert job.status.runs == 2
        await job.stop()


class TestFailures:
    async def test_exception_recorded_not_raised(self):
        async def work():
            raise RuntimeError("database is locked")

        job = PeriodicJob("broken", work, interval_s=60, timeout_s=5)

        assert await job.tick() is True
        assert job.status.failures == 1
        assert job.status.last_error == "RuntimeError: database is locked"
        assert job.in_flight is False

    async def test_success_clears_last_error(self):
        outcomes = [RuntimeError("boom"), None]

        async def work():
            outcome = outcomes.pop(0)
            if outcome is not None:
                raise outcome

        job = PeriodicJob("flaky", work, interval_s=60, timeout_s=5)
        await job.tick()
        await job.tick()
        assert job.status.failures == 1
        assert job.status.last_error is None


class TestTimer:
    async def test_start_runs_on_interval(self):
        calls = 0

        async def work():
            nonlocal calls
            calls += 1

        job = PeriodicJob("timer", work, interval_s=0.02, timeout_s=1)
        job.start()
        await asyncio.sleep(0.15)
        await job.stop()

        assert calls >= 3
        count = calls
        await asyncio.sleep(0.05)
        assert calls == count

    async def test_run_on_start_disabled(self):
        calls = 0

        async def work():
            nonlocal calls
            calls += 1

        job = PeriodicJob("lazy", work, interval_s=10, timeout_s=1, run_on_start=False)
        job.start()
        await asyncio.sleep(0.05)
        await job.stop()

        assert calls == 0

    async def test_stop_cancels_in_flight_work(self):
        cancelled = asyncio.Event()

        async def work():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        job = PeriodicJob("long", work, interval_s=10, timeout_s=30)
        job.start()
        await asyncio.sleep(0.05)
        assert job.in_flight is True

        await job.stop()
        await asyncio.sleep(0)

        assert cancelled.is_set()
        assert job.in_flight is False
