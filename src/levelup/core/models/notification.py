"""通知设置与活跃度状态模型"""

from datetime import datetime, time

from pydantic import BaseModel, Field

from ..config import DEFAULT_REMINDER_HOURS_BEFORE, DEFAULT_REMINDER_TIME
from .enums import EngagementTier


class NotificationSettings(BaseModel):
    """用户级通知设置，缺失时使用默认值"""

    user_id: str
    reminders_enabled: bool = Field(default=True, description="是否接收提醒")
    reminder_hours_before: int = Field(
        default=DEFAULT_REMINDER_HOURS_BEFORE,
        ge=0,
        description="截止前多少小时提醒，0 表示使用默认值",
    )
    reminder_time: time = Field(
        default=time.fromisoformat(DEFAULT_REMINDER_TIME),
        description="无具体时刻的任务在截止前一天的本地提醒时刻",
    )
    poke_enabled: bool = Field(default=True, description="是否允许被戳")


class EngagementState(BaseModel):
    """(space, user) 维度各提醒分层的最后发送时间"""

    space_id: str
    user_id: str
    last_nudge_at: datetime | None = None
    last_beg_at: datetime | None = None
    last_reengage_at: datetime | None = None
    last_reward_at: datetime | None = None

    def last_sent(self, tier: EngagementTier) -> datetime | None:
        return getattr(self, f"last_{tier.value}_at")
