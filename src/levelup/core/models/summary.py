"""WeeklySummary Domain Model

每周为每个 (space, user) 生成一条差值记录，
同时保存快照字段供下周计算差值使用。
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


class WeeklySummary(BaseModel):
    """周报记录"""

    space_id: str
    user_id: str
    week_start: date = Field(description="本周周一（本地日期）")

    # 差值字段
    tasks_completed: int = Field(default=0, ge=0, description="本周完成次数")
    levels_gained: int = Field(default=0, ge=0, description="本周升级数")
    leaderboard_change: int = Field(
        default=0,
        description="排行榜名次变化，正数表示上升",
    )

    # 快照字段
    level: int = Field(default=1, description="生成时的等级")
    total_xp: int = Field(default=0, description="生成时的累计 XP")
    leaderboard_position: int = Field(default=1, description="生成时的名次")
    completions_total: int = Field(default=0, description="生成时的累计完成次数")

    created_at: datetime
