"""XP 变更原子事务封装

在同一 SQLite 事务内提交统计更新与完成记录，
任一步失败时整体回滚。
"""

import aiosqlite

from ..models.stats import TaskCompletionRecord, UserSpaceStats
from .completion_store import SqliteCompletionStore
from .stats_store import SqliteStatsStore


async def write_stats_and_completion(
    conn: aiosqlite.Connection,
    stats_store: SqliteStatsStore,
    completion_store: SqliteCompletionStore,
    stats: UserSpaceStats,
    completion: TaskCompletionRecord | None = None,
) -> None:
    """在同一事务内写入统计（total_xp + level）与可选的完成记录

    Args:
        conn: 数据库连接（需在同一连接上操作以保证事务性）
        stats_store: StatsStore 实例
        completion_store: CompletionStore 实例
        stats: 新的统计值
        completion: 要追加的完成记录；惩罚与奖励等非完成类变更传 None

    Raises:
        Exception: 如果事务提交失败，自动回滚
    """
    try:
        await stats_store.upsert_stats(stats)
        if completion is not None:
            await completion_store.append_completion(completion)
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise
