"""PeriodicJob -- 单飞（single-flight）周期任务

- 每个间隔触发一次 tick；上一次 tick 尚未结束时本次直接跳过，不排队
- 每次 tick 有超时预算；超时后放弃等待（shield，不取消工作），释放守卫
- tick 内的异常在 tick 边界记录，不会传播到驱动循环
- 仅进程内互斥，不提供跨进程排他
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

import structlog
from levelup.core.exceptions import JobTimeoutError
from pydantic import BaseModel, Field
from ulid import ULID

log = structlog.get_logger()

JobFunc = Callable[[], Awaitable[Any]]


class JobStatus(BaseModel):
    """任务运行状态（/ready 展示）"""

    name: str
    interval_s: float
    timeout_s: float
    running: bool = False
    runs: int = Field(default=0, description="完成（含失败）的 tick 数")
    skipped: int = Field(default=0, description="因上一次未结束而跳过的 tick 数")
    failures: int = 0
    timeouts: int = 0
    last_started_at: datetime | None = None
    last_finished_at: datetime | None = None
    last_error: str | None = None


class PeriodicJob:
    """周期任务"""

    def __init__(
        self,
        name: str,
        func: JobFunc,
        interval_s: float,
        timeout_s: float,
        run_on_start: bool = True,
    ) -> None:
        self.name = name
        self._func = func
        self._interval_s = interval_s
        self._timeout_s = timeout_s
        self._run_on_start = run_on_start

        self._in_flight = False
        self._loop_task: asyncio.Task | None = None
        self._tick_tasks: set[asyncio.Task] = set()
        # 超时后仍在后台运行的工作
        self._abandoned: set[asyncio.Future] = set()
        self.status = JobStatus(name=name, interval_s=interval_s, timeout_s=timeout_s)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def tick(self) -> bool:
        """执行一次 tick

        Returns:
            False 表示因单飞守卫被跳过
        """
        if self._in_flight:
            self.status.skipped += 1
            log.info("job_tick_skipped", job=self.name, reason="in_flight")
            return False

        self._in_flight = True
        self.status.running = True
        self.status.last_started_at = datetime.now(UTC)
        tick_id = str(ULID())

        with structlog.contextvars.bound_contextvars(job=self.name, tick_id=tick_id):
            work = asyncio.ensure_future(self._func())
            try:
                await asyncio.wait_for(asyncio.shield(work), timeout=self._timeout_s)
            except TimeoutError:
                error = JobTimeoutError(self.name, self._timeout_s)
                self.status.timeouts += 1
                self.status.last_error = str(error)
                self._abandon(work)
                log.warning("job_tick_timeout", timeout_s=self._timeout_s)
            except asyncio.CancelledError:
                work.cancel()
                raise
            except Exception as e:
                self.status.failures += 1
                self.status.last_error = f"{type(e).__name__}: {e}"
                log.error(
                    "job_tick_failed",
                    error_type=type(e).__name__,
                    error=str(e),
                )
            else:
                self.status.last_error = None
                log.debug("job_tick_completed")
            finally:
                self._in_flight = False
                self.status.running = False
                self.status.runs += 1
                self.status.last_finished_at = datetime.now(UTC)

        return True

    def _abandon(self, work: asyncio.Future) -> None:
        """超时的工作继续在后台运行，结束时记录结果"""
        self._abandoned.add(work)

        def _done(fut: asyncio.Future) -> None:
            self._abandoned.discard(fut)
            if fut.cancelled():
                return
            exc = fut.exception()
            if exc is not None:
                log.error(
                    "job_abandoned_work_failed",
                    job=self.name,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
            else:
                log.info("job_abandoned_work_finished", job=self.name)

        work.add_done_callback(_done)

    def _spawn_tick(self) -> None:
        task = asyncio.create_task(self.tick(), name=f"{self.name}-tick")
        self._tick_tasks.add(task)
        task.add_done_callback(self._tick_tasks.discard)

    async def _run_forever(self) -> None:
        if self._run_on_start:
            self._spawn_tick()
        while True:
            await asyncio.sleep(self._interval_s)
            self._spawn_tick()

    def start(self) -> None:
        """在当前事件循环中启动定时器（需在运行中的事件循环内调用）"""
        if self._loop_task is not None:
            return
        self._loop_task = asyncio.create_task(self._run_forever(), name=f"{self.name}-timer")
        log.info(
            "job_started",
            job=self.name,
            interval_s=self._interval_s,
            timeout_s=self._timeout_s,
        )

    async def stop(self) -> None:
        """停止定时器并取消进行中与已放弃的工作"""
        pending: list[asyncio.Future] = []
        if self._loop_task is not None:
            self._loop_task.cancel()
            pending.append(self._loop_task)
            self._loop_task = None
        for task in list(self._tick_tasks) + list(self._abandoned):
            task.cancel()
            pending.append(task)

        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        log.info("job_stopped", job=self.name)
