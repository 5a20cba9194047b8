"""Store Protocol 接口定义

定义各存储的抽象接口，使用 Python Protocol 实现结构化子类型（duck typing）。
写操作不提交事务，由调用方（服务层或 transaction 封装）负责 commit。
"""

from datetime import date, datetime
from typing import Protocol

from ..models.enums import EngagementTier
from ..models.notification import EngagementState, NotificationSettings
from ..models.space import Space, SpaceMember, User
from ..models.stats import LevelRequirement, Reward, TaskCompletionRecord, UserSpaceStats
from ..models.summary import WeeklySummary
from ..models.task import Task


class TaskStore(Protocol):
    """Task 存储接口"""

    async def create_task(self, task: Task) -> None: ...

    async def get_task(self, task_id: str) -> Task | None: ...

    async def list_tasks_for_space(self, space_id: str) -> list[Task]: ...

    async def list_reminder_candidates(self, due_before: datetime) -> list[Task]:
        """未暂停、未提醒、due_at <= due_before"""
        ...

    async def list_expired_recurring(self, now: datetime) -> list[Task]:
        """未暂停、周期任务、due_at < now"""
        ...

    async def reschedule_task(
        self,
        task_id: str,
        due_at: datetime,
        updated_at: datetime,
    ) -> None:
        """写入 due_at 并清除 reminder_sent"""
        ...

    async def mark_reminder_sent(self, task_id: str, updated_at: datetime) -> None: ...

    async def set_paused(self, task_id: str, paused: bool, updated_at: datetime) -> None: ...

    async def delete_task(self, task_id: str) -> bool:
        """返回是否删除了一行"""
        ...


class SpaceStore(Protocol):
    """用户 / 空间 / 成员存储接口"""

    async def save_user(self, user: User) -> None: ...

    async def get_user(self, user_id: str) -> User | None: ...

    async def create_space(self, space: Space) -> None: ...

    async def get_space(self, space_id: str) -> Space | None: ...

    async def list_spaces(self) -> list[Space]: ...

    async def add_member(self, space_id: str, user_id: str, joined_at: datetime) -> None: ...

    async def list_member_ids(self, space_id: str) -> list[str]: ...

    async def list_memberships(self) -> list[SpaceMember]: ...


class StatsStore(Protocol):
    """XP 统计存储接口"""

    async def get_stats(self, space_id: str, user_id: str) -> UserSpaceStats | None: ...

    async def upsert_stats(self, stats: UserSpaceStats) -> None: ...

    async def list_stats_for_space(self, space_id: str) -> list[UserSpaceStats]: ...

    async def list_all_stats(self) -> list[UserSpaceStats]: ...

    async def get_level_requirements(self, space_id: str) -> dict[int, int]: ...

    async def set_level_requirement(self, requirement: LevelRequirement) -> None: ...

    async def get_reward(self, space_id: str, level: int) -> Reward | None: ...

    async def set_reward(self, reward: Reward) -> None: ...


class CompletionStore(Protocol):
    """完成记录存储接口 -- append-only"""

    async def append_completion(self, record: TaskCompletionRecord) -> None: ...

    async def list_for_task(self, task_id: str) -> list[TaskCompletionRecord]: ...

    async def count_completions(
        self,
        space_id: str,
        user_id: str,
        since: datetime | None = None,
    ) -> int: ...

    async def last_completion_at(self, space_id: str, user_id: str) -> datetime | None: ...


class SettingsStore(Protocol):
    """通知设置与活跃度状态存储接口"""

    async def get_settings(self, user_id: str) -> NotificationSettings: ...

    async def save_settings(self, settings: NotificationSettings) -> None: ...

    async def max_reminder_hours_before(self) -> int | None: ...

    async def get_engagement_state(self, space_id: str, user_id: str) -> EngagementState: ...

    async def record_engagement(
        self,
        space_id: str,
        user_id: str,
        kind: EngagementTier | str,
        sent_at: datetime,
    ) -> None: ...


class SummaryStore(Protocol):
    """周报存储接口"""

    async def get_summary(
        self,
        space_id: str,
        user_id: str,
        week_start: date,
    ) -> WeeklySummary | None: ...

    async def get_previous_summary(
        self,
        space_id: str,
        user_id: str,
        week_start: date,
    ) -> WeeklySummary | None: ...

    async def save_summary(self, summary: WeeklySummary) -> bool: ...

    async def list_for_week(self, week_start: date) -> list[WeeklySummary]: ...
