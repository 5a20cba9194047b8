"""SchedulerConfig -- 后台任务调度配置加载"""

import math
import os

import structlog
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

log = structlog.get_logger()


class SchedulerConfig(BaseModel):
    """调度配置 -- 从环境变量加载

    环境变量:
        LEVELUP_REMINDER_INTERVAL_S: 提醒 tick 间隔（默认 60）
        LEVELUP_REMINDER_TIMEOUT_S: 提醒 tick 超时（默认 25）
        LEVELUP_ENGAGEMENT_INTERVAL_S: 活跃度任务最小间隔（默认 6 小时）
        LEVELUP_EXPIRATION_INTERVAL_S: 过期 tick 间隔（默认 60）
        LEVELUP_EXPIRATION_MIN_GAP_S: 过期扫描最小间隔（默认 1 小时）
        LEVELUP_SUMMARY_INTERVAL_S: 周报 tick 间隔（默认 1 小时）
        LEVELUP_JOB_TIMEOUT_S: 其余任务单次 tick 超时（默认 300）
        LEVELUP_SUMMARY_TIMEZONE: 周报时间窗口所用时区（默认服务器本地时区）
        LEVELUP_SCHEDULER_ENABLED: 是否随 gateway 启动调度器（默认 1）
        LEVELUP_SCHEDULER_REMINDERS / _EXPIRATION / _SUMMARIES: 任务开关（0/1）
        LEVELUP_SCHEDULER_RUN_ON_START: 启动时立即执行一次（默认 1）
    """

    reminder_interval_s: float = Field(default=60, gt=0)
    reminder_timeout_s: float = Field(default=25, gt=0)
    engagement_interval_s: float = Field(default=6 * 3600, gt=0)
    expiration_interval_s: float = Field(default=60, gt=0)
    expiration_min_gap_s: float = Field(default=3600, ge=0)
    summary_interval_s: float = Field(default=3600, gt=0)
    job_timeout_s: float = Field(default=300, gt=0)
    summary_timezone: str | None = Field(
        default=None,
        description="IANA 时区标识，为空时使用服务器本地时区",
    )

    enabled: bool = Field(default=True, description="是否随 gateway 启动调度器")
    reminders_enabled: bool = True
    expiration_enabled: bool = True
    summaries_enabled: bool = True
    run_on_start: bool = True


_FLOAT_ENV = {
    "LEVELUP_REMINDER_INTERVAL_S": "reminder_interval_s",
    "LEVELUP_REMINDER_TIMEOUT_S": "reminder_timeout_s",
    "LEVELUP_ENGAGEMENT_INTERVAL_S": "engagement_interval_s",
    "LEVELUP_EXPIRATION_INTERVAL_S": "expiration_interval_s",
    "LEVELUP_EXPIRATION_MIN_GAP_S": "expiration_min_gap_s",
    "LEVELUP_SUMMARY_INTERVAL_S": "summary_interval_s",
    "LEVELUP_JOB_TIMEOUT_S": "job_timeout_s",
}

_BOOL_ENV = {
    "LEVELUP_SCHEDULER_ENABLED": "enabled",
    "LEVELUP_SCHEDULER_REMINDERS": "reminders_enabled",
    "LEVELUP_SCHEDULER_EXPIRATION": "expiration_enabled",
    "LEVELUP_SCHEDULER_SUMMARIES": "summaries_enabled",
    "LEVELUP_SCHEDULER_RUN_ON_START": "run_on_start",
}


def load_scheduler_config() -> SchedulerConfig:
    """从环境变量加载调度配置

    非法数值（无法解析、非有限值或违反字段约束）记录 warning 并使用默认值，不阻塞启动。
    """
    defaults = SchedulerConfig()
    kwargs: dict = {}

    for env_var, field in _FLOAT_ENV.items():
        val = os.environ.get(env_var)
        if not val:
            continue
        try:
            number = float(val)
            if not math.isfinite(number):
                raise ValueError(val)
            # 按字段约束逐项校验，单个非法值不影响其余字段
            SchedulerConfig(**{field: number})
            kwargs[field] = number
        except (ValueError, PydanticValidationError):
            log.warning(
                "invalid_scheduler_config",
                env_var=env_var,
                value=val,
                fallback=getattr(defaults, field),
            )

    for env_var, field in _BOOL_ENV.items():
        val = os.environ.get(env_var)
        if val is not None and val != "":
            kwargs[field] = val.strip().lower() in ("1", "true", "yes", "on")

    if val := os.environ.get("LEVELUP_SUMMARY_TIMEZONE"):
        kwargs["summary_timezone"] = val

    return SchedulerConfig(**kwargs)
