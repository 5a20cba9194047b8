"""TelegramTransport -- Telegram Bot API sendMessage 封装

通过 httpx.AsyncClient 调用 {api_url}/bot{token}/sendMessage，HTML 解析模式。
所有异常内部捕获并返回 False。
"""

import httpx
import structlog

from .config import TransportConfig
from .exceptions import TransportError, TransportRejectedError, TransportUnreachableError

log = structlog.get_logger()

# 连接类异常类型集合
_CONNECTION_ERROR_TYPES = (
    httpx.ConnectError,
    httpx.TimeoutException,
    httpx.NetworkError,
)


class TelegramTransport:
    """Telegram Bot API 消息通道"""

    def __init__(
        self,
        bot_token: str,
        api_url: str = "https://api.telegram.org",
        timeout_s: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            bot_token: Telegram bot token
            api_url: Bot API 基础 URL
            timeout_s: 请求超时（秒）
            client: 外部注入的 httpx 客户端（测试使用 MockTransport）；
                    为空时自行创建并在 aclose() 中关闭
        """
        self._api_url = api_url.rstrip("/")
        self._bot_token = bot_token
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    @classmethod
    def from_config(cls, config: TransportConfig) -> "TelegramTransport":
        return cls(
            bot_token=config.bot_token.get_secret_value(),
            api_url=config.api_url,
            timeout_s=config.timeout_s,
        )

    async def send_message(self, chat_id: str, text: str) -> bool:
        """发送消息，失败返回 False"""
        try:
            await self._post_message(chat_id, text)
        except TransportError as e:
            log.warning(
                "telegram_send_failed",
                chat_id=chat_id,
                error=str(e),
                recoverable=e.recoverable,
            )
            return False

        log.info("telegram_message_sent", chat_id=chat_id)
        return True

    async def _post_message(self, chat_id: str, text: str) -> None:
        url = f"{self._api_url}/bot{self._bot_token}/sendMessage"
        payload = {"chat_id": chat_id, "text": text, "parse_mode": "HTML"}
        try:
            resp = await self._client.post(url, json=payload)
        except _CONNECTION_ERROR_TYPES as e:
            raise TransportUnreachableError(self._api_url, e) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Telegram 请求失败: {e}") from e

        if not resp.is_success:
            raise TransportRejectedError(resp.status_code, self._describe_error(resp))

    @staticmethod
    def _describe_error(resp: httpx.Response) -> str:
        """提取 Bot API 错误描述（响应体非 JSON 时返回空串）"""
        try:
            body = resp.json()
        except ValueError:
            return ""
        if isinstance(body, dict):
            return str(body.get("description", ""))
        return ""

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
