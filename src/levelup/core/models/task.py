"""Task Domain Model

带有重复规则的任务只会被重新排期，永远不会因完成或过期被删除；
没有重复规则的任务在完成时删除（一次性语义）。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..config import MAX_DIFFICULTY, MIN_DIFFICULTY, XP_PER_DIFFICULTY
from .enums import AssigneeScope
from .recurrence import RecurrenceRule, is_recurring


class Task(BaseModel):
    """Task 数据模型"""

    task_id: str = Field(description="唯一标识，ULID 格式")
    space_id: str = Field(description="所属空间 ID")
    title: str = Field(description="任务标题")
    difficulty: int = Field(
        default=1,
        ge=MIN_DIFFICULTY,
        le=MAX_DIFFICULTY,
        description="难度 1..5，线性映射到 XP",
    )
    due_at: datetime | None = Field(default=None, description="截止时间（UTC）")
    is_paused: bool = Field(default=False, description="是否暂停")
    reminder_sent: bool = Field(default=False, description="本周期是否已提醒")
    due_has_time: bool = Field(
        default=True,
        description="一次性任务的截止时间是否含具体时刻（否则只有日期）",
    )
    recurrence: RecurrenceRule | None = Field(default=None, description="重复规则")
    assignee_scope: AssigneeScope = Field(
        default=AssigneeScope.USER,
        description="执行人范围",
    )
    assignee_user_id: str | None = Field(
        default=None,
        description="执行人，仅在 scope=user 时有效",
    )
    created_by: str = Field(description="创建者 ID")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    @property
    def xp(self) -> int:
        """完成任务获得的 XP"""
        return self.difficulty * XP_PER_DIFFICULTY

    @property
    def is_recurring(self) -> bool:
        return is_recurring(self.recurrence)

    @property
    def has_due_time(self) -> bool:
        """周期任务看规则的 time_of_day，一次性任务看 due_has_time"""
        if self.is_recurring:
            return self.recurrence.time_of_day is not None
        return self.due_has_time

    def resolve_assignee(self) -> str:
        """单人任务的接收人：assignee，缺省为创建者"""
        return self.assignee_user_id or self.created_by
