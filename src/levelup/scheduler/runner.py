"""后台调度入口

start_scheduler() 在当前事件循环中启动三个周期任务：
- reminders: 每 60 秒发送任务提醒；同一 tick 内每 6 小时最多运行一次活跃度任务
- expiration: 每 60 秒检查一次，距上次成功扫描满 1 小时才执行
- summaries: 每小时检查一次，仅在周一 01:00 / 周日 23:00（汇总时区）执行，
  同一日历日最多一次
"""

from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta, tzinfo

import structlog
from levelup.core.store import StoreGroup
from levelup.core.timezone import resolve_zone
from levelup.engine.engagement import EngagementService
from levelup.engine.lifecycle import TaskLifecycleService
from levelup.engine.notifier import Notifier
from levelup.engine.reminders import send_task_reminders
from levelup.engine.summaries import generate_weekly_summaries

from .config import SchedulerConfig
from .job import JobStatus, PeriodicJob

log = structlog.get_logger()

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


def summary_zone(config: SchedulerConfig) -> tzinfo | None:
    """周报时区：配置值；未配置时返回 None，表示每次按服务器当前本地时区计算"""
    if config.summary_timezone:
        return resolve_zone(config.summary_timezone)
    return None


def in_summary_window(local_now: datetime) -> bool:
    """周一 01 点或周日 23 点"""
    weekday = local_now.weekday()
    return (weekday == 0 and local_now.hour == 1) or (weekday == 6 and local_now.hour == 23)


class SchedulerHandle:
    """运行中的调度器"""

    def __init__(self, jobs: list[PeriodicJob]) -> None:
        self._jobs = jobs
        self._stopped = False

    @property
    def jobs(self) -> dict[str, PeriodicJob]:
        return {job.name: job for job in self._jobs}

    @property
    def running(self) -> bool:
        return not self._stopped

    def status(self) -> list[JobStatus]:
        return [job.status.model_copy() for job in self._jobs]

    async def stop(self) -> None:
        """停止所有任务（幂等）"""
        if self._stopped:
            return
        self._stopped = True
        for job in self._jobs:
            await job.stop()
        log.info("scheduler_stopped", jobs=len(self._jobs))


class JobRunner:
    """各周期任务的 tick 函数及其节流状态"""

    def __init__(
        self,
        config: SchedulerConfig,
        stores: StoreGroup,
        lifecycle: TaskLifecycleService,
        engagement: EngagementService,
        notifier: Notifier,
        clock: Clock = _utc_now,
    ) -> None:
        self._config = config
        self._stores = stores
        self._lifecycle = lifecycle
        self._engagement = engagement
        self._notifier = notifier
        self._clock = clock
        self._summary_zone = summary_zone(config)

        self.last_engagement_at: datetime | None = None
        self.last_expiration_at: datetime | None = None
        self.last_summary_date: date | None = None

    async def reminders_tick(self) -> None:
        now = self._clock()
        await send_task_reminders(self._stores, self._notifier, now=now)

        gap = timedelta(seconds=self._config.engagement_interval_s)
        if self.last_engagement_at is None or now - self.last_engagement_at >= gap:
            await self._engagement.send_engagement_notifications(now=now)
            self.last_engagement_at = now

    async def expiration_tick(self) -> None:
        now = self._clock()
        gap = timedelta(seconds=self._config.expiration_min_gap_s)
        if self.last_expiration_at is not None and now - self.last_expiration_at < gap:
            return
        await self._lifecycle.process_expired_recurring_tasks(now=now)
        self.last_expiration_at = now

    async def summaries_tick(self) -> None:
        now = self._clock()
        # 未配置时区时每次重新取本地偏移，跨夏令时切换后仍正确
        local_now = now.astimezone(self._summary_zone) if self._summary_zone else now.astimezone()
        if not in_summary_window(local_now):
            return
        if self.last_summary_date == local_now.date():
            return
        await generate_weekly_summaries(self._stores, local_now.tzinfo, now=now)
        self.last_summary_date = local_now.date()


def build_jobs(config: SchedulerConfig, runner: JobRunner) -> list[PeriodicJob]:
    jobs: list[PeriodicJob] = []
    if config.reminders_enabled:
        jobs.append(
            PeriodicJob(
                "reminders",
                runner.reminders_tick,
                interval_s=config.reminder_interval_s,
                timeout_s=config.reminder_timeout_s,
                run_on_start=config.run_on_start,
            )
        )
    if config.expiration_enabled:
        jobs.append(
            PeriodicJob(
                "expiration",
                runner.expiration_tick,
                interval_s=config.expiration_interval_s,
                timeout_s=config.job_timeout_s,
                run_on_start=config.run_on_start,
            )
        )
    if config.summaries_enabled:
        jobs.append(
            PeriodicJob(
                "summaries",
                runner.summaries_tick,
                interval_s=config.summary_interval_s,
                timeout_s=config.job_timeout_s,
                run_on_start=config.run_on_start,
            )
        )
    return jobs


def start_scheduler(
    config: SchedulerConfig,
    stores: StoreGroup,
    lifecycle: TaskLifecycleService,
    engagement: EngagementService,
    notifier: Notifier,
    clock: Clock = _utc_now,
) -> SchedulerHandle:
    """启动后台调度（需在运行中的事件循环内调用）

    Raises:
        InvalidTimezoneError: summary_timezone 非法
    """
    runner = JobRunner(config, stores, lifecycle, engagement, notifier, clock=clock)
    jobs = build_jobs(config, runner)
    for job in jobs:
        job.start()
    log.info("scheduler_started", jobs=[job.name for job in jobs])
    return SchedulerHandle(jobs)
