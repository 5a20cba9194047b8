"""LevelUp 引擎异常体系

NotFound / InvalidState 直接反馈给调用方；
Validation 类错误应在任务创建时被拒绝，调度器正常运行时不会遇到；
JobTimeout 仅在调度器 tick 边界记录，不向外传播。
"""


class LevelUpError(Exception):
    """引擎基础异常"""

    def __init__(self, message: str, recoverable: bool = False) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class NotFoundError(LevelUpError):
    """任务 / 用户 / 空间不存在"""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} 不存在: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class InvalidStateError(LevelUpError):
    """实体状态不允许该操作（如一次性任务已被完成）"""


class ValidationError(LevelUpError):
    """输入数据不合法"""


class RecurrenceValidationError(ValidationError):
    """重复规则格式错误"""


class InvalidTimezoneError(ValidationError):
    """非法 IANA 时区标识

    属于配置错误，不会静默回退到 UTC。
    """

    def __init__(self, timezone: str) -> None:
        super().__init__(f"非法时区标识: {timezone!r}")
        self.timezone = timezone


class JobTimeoutError(LevelUpError):
    """调度任务超出单次 tick 的时间预算"""

    def __init__(self, job_name: str, timeout_s: float) -> None:
        super().__init__(
            f"调度任务 {job_name} 超时（{timeout_s}s）",
            recoverable=True,
        )
        self.job_name = job_name
        self.timeout_s = timeout_s
