"""MessageTransport Protocol -- 引擎唯一依赖的外发接口"""

from typing import Protocol


class MessageTransport(Protocol):
    """向用户发送一条文本消息

    返回 True 表示通道确认投递，False 表示失败（原因已由通道记录）。
    实现不应抛出异常；调用方仍会兜底捕获。
    """

    async def send_message(self, chat_id: str, text: str) -> bool: ...
