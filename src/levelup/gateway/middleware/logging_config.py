"""structlog 配置模块

LEVELUP_LOG_FORMAT: "json"（生产）或 "dev"（默认，控制台可读输出）
LEVELUP_LOG_LEVEL: root logger 级别（默认 INFO，非法值回退 INFO）

Telegram Bot API 的 URL 形如 https://api.telegram.org/bot<id>:<secret>/sendMessage，
任何日志字段中出现的 token 都会被替换为 bot<redacted>。
"""

import logging
import os
import re

import structlog
from structlog.typing import EventDict, WrappedLogger

_BOT_TOKEN_RE = re.compile(r"bot\d+:[A-Za-z0-9_-]+")
_REDACTED = "bot<redacted>"

# 第三方库的噪声日志
_QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def redact_bot_token(_logger: WrappedLogger, _method_name: str, event_dict: EventDict) -> EventDict:
    """替换字符串字段中的 bot token"""
    for key, value in event_dict.items():
        if isinstance(value, str) and "bot" in value:
            event_dict[key] = _BOT_TOKEN_RE.sub(_REDACTED, value)
    return event_dict


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging() -> None:
    """按环境变量初始化 structlog + 标准库 logging（重复调用会替换 root handler）"""
    json_output = os.environ.get("LEVELUP_LOG_FORMAT", "dev") == "json"
    level = _resolve_level(os.environ.get("LEVELUP_LOG_LEVEL", "INFO"))

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_bot_token,
    ]
    if json_output:
        pre_chain.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
