"""消息通道异常体系"""


class TransportError(Exception):
    """消息通道基础异常

    发送失败在通道内部记录日志并转为 False 返回，不会中断调用方。
    """

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试恢复（调度器在同一 tick 内不重试）
        """
        super().__init__(message)
        self.recoverable = recoverable


class TransportRejectedError(TransportError):
    """通道返回非 2xx 响应（如用户屏蔽了 bot、chat_id 无效）"""

    def __init__(self, status_code: int, description: str = "") -> None:
        super().__init__(
            f"消息被拒绝: HTTP {status_code} {description}".rstrip(),
            recoverable=status_code >= 500 or status_code == 429,
        )
        self.status_code = status_code
        self.description = description


class TransportUnreachableError(TransportError):
    """通道不可达（连接失败、超时等）"""

    def __init__(self, api_url: str, original_error: Exception) -> None:
        super().__init__(
            f"消息通道不可达: {api_url} -- {original_error}",
            recoverable=True,
        )
        self.api_url = api_url
        self.original_error = original_error
