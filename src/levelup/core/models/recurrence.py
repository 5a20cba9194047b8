"""RecurrenceRule Domain Model -- 封闭的 tagged union

none | daily | weekly{days_of_week} | monthly{day_of_month}，均可携带 time_of_day。
在边界处（parse_recurrence）完成校验，运行时不再以开放字典形式读取。
"""

import json
from datetime import time
from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import RecurrenceValidationError
from .enums import RecurrenceType


class _RuleBase(BaseModel):
    """所有规则共享的字段"""

    model_config = ConfigDict(frozen=True)

    time_of_day: time | None = Field(
        default=None,
        validation_alias=AliasChoices("time_of_day", "timeOfDay"),
        description="本地时间（HH:MM），为空表示本地零点",
    )


class NoRecurrence(_RuleBase):
    """不重复（一次性任务）"""

    type: Literal["none"] = "none"


class DailyRule(_RuleBase):
    """每天重复"""

    type: Literal["daily"] = "daily"


class WeeklyRule(_RuleBase):
    """按星期重复 -- 0=周日 ... 6=周六"""

    type: Literal["weekly"] = "weekly"
    days_of_week: frozenset[int] = Field(
        default_factory=frozenset,
        validation_alias=AliasChoices("days_of_week", "daysOfWeek"),
        description="星期集合，空集合表示每 7 天",
    )

    @field_validator("days_of_week")
    @classmethod
    def _check_days(cls, value: frozenset[int]) -> frozenset[int]:
        bad = sorted(d for d in value if d < 0 or d > 6)
        if bad:
            raise ValueError(f"days_of_week 超出 0..6: {bad}")
        return value


class MonthlyRule(_RuleBase):
    """按月重复 -- day_of_month 为空时沿用参考日期的日"""

    type: Literal["monthly"] = "monthly"
    day_of_month: int | None = Field(
        default=None,
        ge=1,
        le=31,
        validation_alias=AliasChoices("day_of_month", "dayOfMonth"),
    )


RecurrenceRule = Annotated[
    NoRecurrence | DailyRule | WeeklyRule | MonthlyRule,
    Field(discriminator="type"),
]

_RULE_ADAPTER: TypeAdapter = TypeAdapter(RecurrenceRule)

_TYPE_KEYS = ("type", "recurrence_type", "recurrenceType")


def is_recurring(rule: _RuleBase | None) -> bool:
    """规则是否代表周期任务（None 与 none 都视为一次性）"""
    return rule is not None and rule.type != RecurrenceType.NONE


def parse_recurrence(raw: Any) -> NoRecurrence | DailyRule | WeeklyRule | MonthlyRule | None:
    """在边界处解析重复规则

    接受已构造的规则、dict 或 JSON 字符串（snake_case 或旧版 camelCase 键）。
    旧数据中类型为 daily 但带有非空星期集合的规则按 weekly 解析。

    Raises:
        RecurrenceValidationError: 格式不合法
    """
    if raw is None:
        return None
    if isinstance(raw, _RuleBase):
        return raw
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise RecurrenceValidationError(f"重复规则不是合法 JSON: {e}") from e
        if raw is None:
            return None
    if not isinstance(raw, dict):
        raise RecurrenceValidationError(f"重复规则必须是对象，实际为 {type(raw).__name__}")

    data = dict(raw)
    rule_type = None
    for key in _TYPE_KEYS:
        if key in data:
            rule_type = data.pop(key)
    if rule_type is None:
        raise RecurrenceValidationError("重复规则缺少 type 字段")

    days = data.get("days_of_week", data.get("daysOfWeek"))
    if rule_type == RecurrenceType.DAILY and days:
        rule_type = RecurrenceType.WEEKLY.value
    data["type"] = rule_type

    try:
        return _RULE_ADAPTER.validate_python(data)
    except PydanticValidationError as e:
        raise RecurrenceValidationError(f"重复规则不合法: {e}") from e


def dump_recurrence(rule: _RuleBase | None) -> str | None:
    """序列化为存储用 JSON"""
    if rule is None:
        return None
    return rule.model_dump_json()
