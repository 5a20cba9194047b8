"""LevelUp Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

from pathlib import Path

import aiosqlite

from .completion_store import SqliteCompletionStore
from .settings_store import SqliteSettingsStore
from .space_store import SqliteSpaceStore
from .sqlite_init import init_db, verify_wal_mode
from .stats_store import SqliteStatsStore
from .summary_store import SqliteSummaryStore
from .task_store import SqliteTaskStore
from .transaction import write_stats_and_completion


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.task_store = SqliteTaskStore(conn)
        self.space_store = SqliteSpaceStore(conn)
        self.stats_store = SqliteStatsStore(conn)
        self.completion_store = SqliteCompletionStore(conn)
        self.settings_store = SqliteSettingsStore(conn)
        self.summary_store = SqliteSummaryStore(conn)

    async def close(self) -> None:
        await self.conn.close()


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteTaskStore",
    "SqliteSpaceStore",
    "SqliteStatsStore",
    "SqliteCompletionStore",
    "SqliteSettingsStore",
    "SqliteSummaryStore",
    "init_db",
    "verify_wal_mode",
    "write_stats_and_completion",
]
