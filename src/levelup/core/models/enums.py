"""枚举定义

包含 RecurrenceType、AssigneeScope、EngagementTier 枚举。
"""

from enum import StrEnum


class RecurrenceType(StrEnum):
    """重复规则类型"""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class AssigneeScope(StrEnum):
    """任务执行人范围"""

    # 单个用户（assignee_user_id，缺省为创建者）
    USER = "user"
    # 整个空间（全部成员同时完成）
    SPACE = "space"


class EngagementTier(StrEnum):
    """活跃度提醒分层，按严重程度从高到低排列"""

    REENGAGE = "reengage"
    BEG = "beg"
    NUDGE = "nudge"
