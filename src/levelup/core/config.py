"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、等级曲线、提醒与活跃度分层等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("LEVELUP_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "LEVELUP_DB_PATH",
        str(_get_base_dir() / "sqlite" / "levelup.db"),
    )


# 等级上限（超过上限阈值的 XP 不再产生效果）
MAX_LEVEL: int = 80

# 默认等级曲线基数：round(BASE * (1 + level * STEP))
BASE_XP_PER_LEVEL: int = 100
LEVEL_XP_STEP: float = 0.02

# 每点难度对应的 XP
XP_PER_DIFFICULTY: int = 10
MIN_DIFFICULTY: int = 1
MAX_DIFFICULTY: int = 5

# 提醒默认提前量（小时）
DEFAULT_REMINDER_HOURS_BEFORE: int = int(
    os.environ.get("LEVELUP_DEFAULT_REMINDER_HOURS_BEFORE", "2")
)

# 无具体时刻的任务：截止前一天的本地提醒时刻（HH:MM）
DEFAULT_REMINDER_TIME: str = os.environ.get("LEVELUP_DEFAULT_REMINDER_TIME", "18:00")

# 提醒候选任务的最小查找窗口（小时），覆盖前一天提醒
REMINDER_MIN_HORIZON_HOURS: int = 48

# 活跃度分层阈值与冷却（天）：(不活跃天数, 冷却天数)
REENGAGE_AFTER_DAYS: int = 14
REENGAGE_COOLDOWN_DAYS: int = 7
BEG_AFTER_DAYS: int = 7
BEG_COOLDOWN_DAYS: int = 3
NUDGE_AFTER_DAYS: int = 3
NUDGE_COOLDOWN_DAYS: int = 1

# 高活跃奖励：24 小时内完成次数阈值 + 奖励 XP + 冷却（小时）
STREAK_COMPLETIONS_THRESHOLD: int = 5
STREAK_REWARD_XP: int = 5
STREAK_REWARD_COOLDOWN_HOURS: int = 24

# 会话状态默认 TTL（秒）
SESSION_TTL_S: int = int(os.environ.get("LEVELUP_SESSION_TTL_S", "86400"))
