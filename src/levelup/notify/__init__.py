"""LevelUp Notify -- 消息通道抽象层

MessageTransport 接口 + Telegram / Log 两种实现。
"""

from .config import TransportConfig, load_transport_config
from .exceptions import TransportError, TransportRejectedError, TransportUnreachableError
from .log_transport import LogTransport, SentMessage
from .telegram import TelegramTransport
from .transport import MessageTransport


def create_transport(config: TransportConfig) -> TelegramTransport | LogTransport:
    """按配置创建消息通道"""
    if config.mode == "telegram":
        return TelegramTransport.from_config(config)
    return LogTransport()


__all__ = [
    "MessageTransport",
    "TelegramTransport",
    "LogTransport",
    "SentMessage",
    "TransportConfig",
    "load_transport_config",
    "create_transport",
    "TransportError",
    "TransportRejectedError",
    "TransportUnreachableError",
]
