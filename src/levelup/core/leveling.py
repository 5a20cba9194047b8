"""等级曲线 -- 纯函数

从等级 1 开始，用累计 XP 依次扣减每级所需 XP（空间自定义表优先，
缺失时使用默认公式），直到不足或达到上限 80 级。
对 total_xp 单调不减；total_xp=0 时为 1 级。
"""

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, Field

from .config import BASE_XP_PER_LEVEL, LEVEL_XP_STEP, MAX_LEVEL, XP_PER_DIFFICULTY
from .models.stats import LevelRequirement

RequirementTable = Mapping[int, int]

_EMPTY_TABLE: dict[int, int] = {}


class LevelProgress(BaseModel):
    """当前等级内的进度"""

    level: int
    xp_into_level: int = Field(ge=0, description="当前等级内已积累的 XP")
    xp_to_next_level: int = Field(ge=0, description="距下一级还差的 XP")
    xp_required: int = Field(ge=0, description="当前等级升级所需 XP，满级为 0")
    percent: int = Field(ge=0, le=100)


def task_xp(difficulty: int) -> int:
    """难度线性映射到 XP"""
    return difficulty * XP_PER_DIFFICULTY


def requirement_table(requirements: Iterable[LevelRequirement]) -> dict[int, int]:
    """LevelRequirement 列表 -> {level: xp_required}"""
    return {req.level: req.xp_required for req in requirements}


def default_xp_for_next_level(level: int) -> int:
    if level >= MAX_LEVEL:
        return 0
    return int(round(BASE_XP_PER_LEVEL * (1 + level * LEVEL_XP_STEP)))


def xp_for_next_level(level: int, table: RequirementTable | None = None) -> int:
    """从 level 升到 level+1 所需 XP，满级返回 0"""
    if level >= MAX_LEVEL:
        return 0
    table = table or _EMPTY_TABLE
    required = table.get(level)
    return required if required is not None else default_xp_for_next_level(level)


def total_xp_for_level(target_level: int, table: RequirementTable | None = None) -> int:
    """到达 target_level 所需的累计 XP"""
    return sum(xp_for_next_level(level, table) for level in range(1, max(1, target_level)))


def calculate_level(total_xp: int, table: RequirementTable | None = None) -> int:
    """累计 XP -> 等级"""
    if total_xp <= 0:
        return 1

    level = 1
    remaining = total_xp
    required = xp_for_next_level(level, table)
    while remaining >= required and level < MAX_LEVEL:
        remaining -= required
        level += 1
        required = xp_for_next_level(level, table)

    return min(level, MAX_LEVEL)


def level_progress(total_xp: int, table: RequirementTable | None = None) -> LevelProgress:
    """累计 XP -> 当前等级进度"""
    level = calculate_level(total_xp, table)
    xp_into_level = max(0, total_xp - total_xp_for_level(level, table))
    required = xp_for_next_level(level, table)
    if required > 0:
        percent = round(xp_into_level / required * 100)
    else:
        percent = 100
    return LevelProgress(
        level=level,
        xp_into_level=xp_into_level,
        xp_to_next_level=max(0, required - xp_into_level),
        xp_required=required,
        percent=max(0, min(100, percent)),
    )
