"""XpLedger -- 串行化的 XP 变更

同一 (space, user) 的变更通过 asyncio.Lock 串行执行：
读取统计 -> 按空间等级需求表重算等级 -> 写入统计 + 可选完成记录 -> 提交。
total_xp 不会低于 0。
"""

import asyncio
import weakref
from datetime import UTC, datetime

import structlog
from levelup.core.leveling import calculate_level
from levelup.core.models.stats import TaskCompletionRecord, UserSpaceStats, XpAwardResult
from levelup.core.store import StoreGroup
from levelup.core.store.transaction import write_stats_and_completion

log = structlog.get_logger()


class XpLedger:
    """XP 账本

    锁按实例持有；同一进程内所有 XP 写入方必须共享同一个 XpLedger。
    """

    def __init__(self, store_group: StoreGroup) -> None:
        self._stores = store_group
        # 无人持有的锁随之回收，键数量不随历史用户数增长
        self._stats_locks: weakref.WeakValueDictionary[tuple[str, str], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._stats_locks_guard = asyncio.Lock()

    async def _get_lock(self, space_id: str, user_id: str) -> asyncio.Lock:
        key = (space_id, user_id)
        async with self._stats_locks_guard:
            lock = self._stats_locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                self._stats_locks[key] = lock
            return lock

    async def apply(
        self,
        space_id: str,
        user_id: str,
        delta: int,
        completion: TaskCompletionRecord | None = None,
        now: datetime | None = None,
    ) -> XpAwardResult:
        """对 (space, user) 应用 XP 变更（可为负）

        Args:
            space_id: 空间 ID
            user_id: 用户 ID
            delta: XP 变化量，负数表示惩罚
            completion: 同一事务内追加的完成记录
            now: 写入时间

        Returns:
            XpAwardResult（level_up 仅在等级上升时为 True）
        """
        now = now or datetime.now(UTC)
        lock = await self._get_lock(space_id, user_id)
        async with lock:
            existing = await self._stores.stats_store.get_stats(space_id, user_id)
            old_level = existing.level if existing else 1
            old_total = existing.total_xp if existing else 0

            new_total = max(0, old_total + delta)
            table = await self._stores.stats_store.get_level_requirements(space_id)
            new_level = calculate_level(new_total, table)

            stats = UserSpaceStats(
                space_id=space_id,
                user_id=user_id,
                total_xp=new_total,
                level=new_level,
                updated_at=now,
            )
            await write_stats_and_completion(
                self._stores.conn,
                self._stores.stats_store,
                self._stores.completion_store,
                stats,
                completion,
            )

        log.debug(
            "xp_applied",
            space_id=space_id,
            user_id=user_id,
            delta=delta,
            new_total_xp=new_total,
            new_level=new_level,
        )
        return XpAwardResult(
            old_level=old_level,
            new_level=new_level,
            new_total_xp=new_total,
            level_up=new_level > old_level,
        )
