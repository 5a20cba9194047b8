"""XP 统计相关模型

UserSpaceStats 的 total_xp 与 level 始终一起写入，
level 必须等于等级曲线对 total_xp 的计算结果。
"""

from datetime import datetime

from pydantic import BaseModel, Field


class UserSpaceStats(BaseModel):
    """(space, user) 维度的累计 XP 与等级"""

    space_id: str
    user_id: str
    total_xp: int = Field(default=0, ge=0, description="累计 XP")
    level: int = Field(default=1, ge=1, description="由 total_xp 推导的等级")
    updated_at: datetime = Field(description="最后更新时间")


class LevelRequirement(BaseModel):
    """空间自定义等级需求：从 level 升到 level+1 所需 XP"""

    space_id: str
    level: int = Field(ge=1)
    xp_required: int = Field(ge=0)


class Reward(BaseModel):
    """达到某等级时公布的奖励文本"""

    space_id: str
    level: int = Field(ge=1)
    text: str


class TaskCompletionRecord(BaseModel):
    """任务完成事实 -- append-only，引擎从不修改或删除"""

    completion_id: str = Field(description="唯一标识，ULID 格式")
    task_id: str
    space_id: str
    user_id: str
    xp: int = Field(description="本次发放的 XP")
    completed_at: datetime


class XpAwardResult(BaseModel):
    """一次 XP 变更的结果"""

    old_level: int
    new_level: int
    new_total_xp: int
    level_up: bool = Field(default=False)
