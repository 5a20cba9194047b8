"""重复规则计算器 -- 纯函数

calculate_next_due_date(rule, timezone, from_instant) -> 下一次截止时间（UTC）。
所有日期运算都在任务所在时区的本地日历上进行，而非 UTC 日加法，
以保证跨夏令时切换时本地时刻正确。
"""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from .models.recurrence import DailyRule, MonthlyRule, WeeklyRule, is_recurring
from .timezone import (
    end_of_local_day,
    local_date,
    local_weekday,
    make_local,
    resolve_zone,
)


def _next_weekly_date(today: date, days_of_week: frozenset[int]) -> date:
    """严格晚于今天的下一个匹配星期；集合为空时 +7 天"""
    if not days_of_week:
        return today + timedelta(days=7)

    current = local_weekday(today)
    ordered = sorted(days_of_week)
    following = [d for d in ordered if d > current]
    if following:
        return today + timedelta(days=following[0] - current)
    # 回绕到下一周最小的星期
    return today + timedelta(days=7 - current + ordered[0])


def _next_monthly_date(today: date, day_of_month: int | None) -> date:
    """下一个日历月的同一天（或指定日）

    不做截断：超出当月天数的日期顺延到下个月（如 2 月 31 日 -> 3 月 3 日）。
    """
    day = day_of_month or today.day
    year, month = (today.year + 1, 1) if today.month == 12 else (today.year, today.month + 1)
    return date(year, month, 1) + timedelta(days=day - 1)


def calculate_next_due_date(
    rule,
    timezone: str | ZoneInfo,
    from_instant: datetime,
) -> datetime:
    """计算下一次截止时间

    Args:
        rule: 重复规则（None / none / 未知类型按 +1 个日历日处理）
        timezone: IANA 时区标识
        from_instant: 参考时间点

    Returns:
        UTC 时间点；规则带 time_of_day 时为该本地时刻，否则为本地零点

    Raises:
        InvalidTimezoneError: 时区标识非法
    """
    zone = resolve_zone(timezone)
    today = local_date(from_instant, zone)

    if isinstance(rule, DailyRule):
        next_day = today + timedelta(days=1)
    elif isinstance(rule, WeeklyRule):
        next_day = _next_weekly_date(today, rule.days_of_week)
    elif isinstance(rule, MonthlyRule):
        next_day = _next_monthly_date(today, rule.day_of_month)
    else:
        next_day = today + timedelta(days=1)

    time_of_day = getattr(rule, "time_of_day", None)
    return make_local(next_day, time_of_day, zone)


def next_cycle_due_date(
    rule,
    timezone: str | ZoneInfo,
    now: datetime,
) -> datetime | None:
    """完成或过期后周期任务的下一个截止时间

    规则没有 time_of_day 时截止时间移到该本地日的 23:59:59.999。
    非周期规则返回 None。
    """
    if not is_recurring(rule):
        return None
    zone = resolve_zone(timezone)
    next_due = calculate_next_due_date(rule, zone, now)
    if rule.time_of_day is None:
        next_due = end_of_local_day(next_due, zone)
    return next_due
