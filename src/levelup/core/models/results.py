"""对外暴露操作的结果类型"""

from pydantic import BaseModel, Field


class CompletionOutcome(BaseModel):
    """complete_task 返回给调用方的单一结果

    仅反映发起完成请求的用户自身的升级情况。
    """

    level_up: bool = Field(default=False)
    new_level: int = Field(default=1)
    xp_awarded: int = Field(default=0, description="请求者获得的 XP")
    recipients: int = Field(default=0, description="获得 XP 的成员数")
    rescheduled: bool = Field(default=False, description="周期任务是否已重新排期")


class ExpirationResult(BaseModel):
    """过期扫描结果"""

    expired: int = Field(default=0, description="扣除了惩罚 XP 的任务数")
    rescheduled: int = Field(default=0, description="重新排期的任务数")
    deleted: int = Field(default=0, description="无法排期而删除的任务数")


class ReminderRunResult(BaseModel):
    """提醒任务单次运行结果"""

    reminders_sent: int = 0
    considered_tasks: int = 0
    horizon_hours: int = 0


class EngagementRunResult(BaseModel):
    """活跃度任务单次运行结果"""

    nudges_sent: int = 0
    begs_sent: int = 0
    reengages_sent: int = 0
    rewards_granted: int = 0
