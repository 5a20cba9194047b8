"""时间戳存储编码

所有时间点统一以 UTC ISO-8601（微秒精度）文本保存，
保证 SQL 中按字符串比较与按时间比较一致。
"""

from datetime import date, datetime

from ..timezone import to_utc


def encode_ts(value: datetime | None) -> str | None:
    if value is None:
        return None
    return to_utc(value).isoformat(timespec="microseconds")


def decode_ts(value: str | None) -> datetime | None:
    if value is None:
        return None
    return to_utc(datetime.fromisoformat(value))


def encode_date(value: date) -> str:
    return value.isoformat()


def decode_date(value: str) -> date:
    return date.fromisoformat(value)
