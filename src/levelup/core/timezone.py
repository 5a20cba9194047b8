"""时区工具 -- 基于 zoneinfo 的本地日历（civil date）计算

所有对外返回的时间点均为带 UTC tzinfo 的 datetime；
日期加减在空间所在时区的本地日历上完成，跨越夏令时切换时保持本地时刻不变。
"""

from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from .exceptions import InvalidTimezoneError

log = structlog.get_logger()


def resolve_zone(timezone: str | ZoneInfo) -> ZoneInfo:
    """解析 IANA 时区标识

    Raises:
        InvalidTimezoneError: 标识不存在或格式非法（不会静默回退到 UTC）
    """
    if isinstance(timezone, ZoneInfo):
        return timezone
    try:
        return ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        log.error("invalid_timezone", timezone=timezone)
        raise InvalidTimezoneError(timezone) from e


def to_utc(instant: datetime) -> datetime:
    """转为 UTC；naive datetime 视为 UTC"""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC)


def local_date(instant: datetime, zone: ZoneInfo) -> date:
    """时间点在指定时区的本地日期"""
    return to_utc(instant).astimezone(zone).date()


def local_weekday(day: date) -> int:
    """星期编号，0=周日 ... 6=周六"""
    return (day.weekday() + 1) % 7


def make_local(day: date, at: time | None, zone: ZoneInfo) -> datetime:
    """本地日期 + 本地时间 -> UTC 时间点（at 为空时取本地零点）"""
    local = datetime.combine(day, at or time(0, 0), tzinfo=zone)
    return local.astimezone(UTC)


def start_of_local_day(instant: datetime, zone: ZoneInfo) -> datetime:
    return make_local(local_date(instant, zone), None, zone)


def end_of_local_day(instant: datetime, zone: ZoneInfo) -> datetime:
    """本地当天 23:59:59.999 对应的 UTC 时间点"""
    next_day = local_date(instant, zone) + timedelta(days=1)
    return make_local(next_day, None, zone) - timedelta(milliseconds=1)