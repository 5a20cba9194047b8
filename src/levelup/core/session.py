"""会话状态 -- 每个用户当前选中的空间

按 user_id 保存，带 TTL 过期淘汰。实例由宿主进程持有并注入
（gateway 中挂在 app.state 上），不使用模块级单例。
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from .config import SESSION_TTL_S

log = structlog.get_logger()


@dataclass
class _Entry:
    space_id: str
    expires_at: float


class SessionStore:
    """user_id -> 当前空间

    读取时淘汰该用户的过期条目；写入时每个 TTL 周期最多全量清扫一次，
    不再访问的用户条目也会被回收。
    """

    def __init__(
        self,
        ttl_s: float = SESSION_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_s = ttl_s
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._next_sweep_at = clock() + ttl_s

    def set_current_space(self, user_id: str, space_id: str) -> None:
        now = self._clock()
        if now >= self._next_sweep_at:
            evicted = self.evict_expired()
            self._next_sweep_at = now + self._ttl_s
            if evicted:
                log.debug("sessions_evicted", count=evicted, remaining=len(self._entries))
        self._entries[user_id] = _Entry(space_id=space_id, expires_at=now + self._ttl_s)

    def get_current_space(self, user_id: str) -> str | None:
        entry = self._entries.get(user_id)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[user_id]
            log.debug("session_expired", user_id=user_id)
            return None
        return entry.space_id

    def clear(self, user_id: str) -> bool:
        """清除会话，返回是否存在"""
        return self._entries.pop(user_id, None) is not None

    def evict_expired(self) -> int:
        """淘汰所有过期条目，返回淘汰数"""
        now = self._clock()
        expired = [uid for uid, entry in self._entries.items() if entry.expires_at <= now]
        for uid in expired:
            del self._entries[uid]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
