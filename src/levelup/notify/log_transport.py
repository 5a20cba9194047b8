"""LogTransport -- 不外发，仅记录日志与消息

开发环境与测试使用；与 TelegramTransport 实现同一接口。
"""

import structlog
from pydantic import BaseModel

log = structlog.get_logger()


class SentMessage(BaseModel):
    chat_id: str
    text: str


class LogTransport:
    """记录消息的通道

    Args:
        fail_chat_ids: 模拟投递失败的 chat_id 集合
    """

    def __init__(self, fail_chat_ids: set[str] | None = None) -> None:
        self.sent: list[SentMessage] = []
        self._fail_chat_ids = fail_chat_ids or set()

    async def send_message(self, chat_id: str, text: str) -> bool:
        if chat_id in self._fail_chat_ids:
            log.warning("log_transport_simulated_failure", chat_id=chat_id)
            return False
        self.sent.append(SentMessage(chat_id=chat_id, text=text))
        log.info("log_transport_message", chat_id=chat_id, text=text)
        return True

    def messages_for(self, chat_id: str) -> list[str]:
        return [m.text for m in self.sent if m.chat_id == chat_id]

    async def aclose(self) -> None:
        return None
