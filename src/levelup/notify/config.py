"""TransportConfig -- 消息通道配置加载

从环境变量加载配置，bot token 使用 SecretStr 避免出现在日志中。
"""

import os
from typing import Literal

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()


class TransportConfig(BaseModel):
    """消息通道配置 -- 从环境变量加载

    环境变量:
        LEVELUP_TRANSPORT_MODE: 通道模式（telegram/log）
        LEVELUP_BOT_TOKEN: Telegram bot token
        LEVELUP_TELEGRAM_API_URL: Bot API 基础 URL
        LEVELUP_TRANSPORT_TIMEOUT_S: 发送超时（秒，默认 10）
    """

    mode: Literal["telegram", "log"] = Field(
        default="log",
        description="通道模式：telegram 实际发送 / log 仅记录日志",
    )
    bot_token: SecretStr = Field(
        default=SecretStr(""),
        description="Telegram bot token",
    )
    api_url: str = Field(
        default="https://api.telegram.org",
        description="Telegram Bot API 基础 URL",
    )
    timeout_s: float = Field(
        default=10.0,
        gt=0,
        description="单条消息发送超时（秒）",
    )


def load_transport_config() -> TransportConfig:
    """从环境变量加载通道配置

    环境变量映射:
        LEVELUP_TRANSPORT_MODE -> mode (默认 "log")
        LEVELUP_BOT_TOKEN -> bot_token (默认 "")
        LEVELUP_TELEGRAM_API_URL -> api_url (默认 "https://api.telegram.org")
        LEVELUP_TRANSPORT_TIMEOUT_S -> timeout_s (默认 10)

    Returns:
        TransportConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("LEVELUP_TRANSPORT_MODE"):
        if val in ("telegram", "log"):
            kwargs["mode"] = val
        else:
            log.warning(
                "invalid_transport_mode",
                env_var="LEVELUP_TRANSPORT_MODE",
                value=val,
                fallback="log",
            )

    if val := os.environ.get("LEVELUP_BOT_TOKEN"):
        kwargs["bot_token"] = SecretStr(val)

    if val := os.environ.get("LEVELUP_TELEGRAM_API_URL"):
        kwargs["api_url"] = val

    if val := os.environ.get("LEVELUP_TRANSPORT_TIMEOUT_S"):
        try:
            timeout = float(val)
            if timeout <= 0:
                raise ValueError(val)
            kwargs["timeout_s"] = timeout
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="LEVELUP_TRANSPORT_TIMEOUT_S",
                value=val,
                fallback=10.0,
            )

    return TransportConfig(**kwargs)
