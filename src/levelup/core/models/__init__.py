"""LevelUp Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import AssigneeScope, EngagementTier, RecurrenceType
from .notification import EngagementState, NotificationSettings
from .recurrence import (
    DailyRule,
    MonthlyRule,
    NoRecurrence,
    RecurrenceRule,
    WeeklyRule,
    dump_recurrence,
    is_recurring,
    parse_recurrence,
)
from .results import (
    CompletionOutcome,
    EngagementRunResult,
    ExpirationResult,
    ReminderRunResult,
)
from .space import Space, SpaceMember, User
from .stats import (
    LevelRequirement,
    Reward,
    TaskCompletionRecord,
    UserSpaceStats,
    XpAwardResult,
)
from .summary import WeeklySummary
from .task import Task

__all__ = [
    # 枚举
    "RecurrenceType",
    "AssigneeScope",
    "EngagementTier",
    # 重复规则
    "RecurrenceRule",
    "NoRecurrence",
    "DailyRule",
    "WeeklyRule",
    "MonthlyRule",
    "parse_recurrence",
    "dump_recurrence",
    "is_recurring",
    # 实体
    "Task",
    "User",
    "Space",
    "SpaceMember",
    "UserSpaceStats",
    "LevelRequirement",
    "Reward",
    "TaskCompletionRecord",
    "NotificationSettings",
    "EngagementState",
    "WeeklySummary",
    # 结果
    "XpAwardResult",
    "CompletionOutcome",
    "ExpirationResult",
    "ReminderRunResult",
    "EngagementRunResult",
]
