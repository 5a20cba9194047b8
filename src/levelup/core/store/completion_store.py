"""CompletionStore SQLite 实现

task_completions 表 append-only：只允许插入，不允许更新或删除。
"""

from datetime import datetime

import aiosqlite

from ..models.stats import TaskCompletionRecord
from .codec import decode_ts, encode_ts


class SqliteCompletionStore:
    """CompletionStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def append_completion(self, record: TaskCompletionRecord) -> None:
        """追加完成记录（append-only）"""
        await self._conn.execute(
            """
            INSERT INTO task_completions
                (completion_id, task_id, space_id, user_id, xp, completed_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                record.completion_id,
                record.task_id,
                record.space_id,
                record.user_id,
                record.xp,
                encode_ts(record.completed_at),
            ),
        )

    async def list_for_task(self, task_id: str) -> list[TaskCompletionRecord]:
        cursor = await self._conn.execute(
            """
            SELECT completion_id, task_id, space_id, user_id, xp, completed_at
            FROM task_completions
            WHERE task_id = ?
            ORDER BY completed_at, completion_id
            """,
            (task_id,),
        )
        rows = await cursor.fetchall()
        return [
            TaskCompletionRecord(
                completion_id=r[0],
                task_id=r[1],
                space_id=r[2],
                user_id=r[3],
                xp=r[4],
                completed_at=decode_ts(r[5]),
            )
            for r in rows
        ]

    async def count_completions(
        self,
        space_id: str,
        user_id: str,
        since: datetime | None = None,
    ) -> int:
        """(space, user) 的完成次数，since 为空时统计全部"""
        if since is None:
            cursor = await self._conn.execute(
                "SELECT COUNT(*) FROM task_completions WHERE space_id = ? AND user_id = ?",
                (space_id, user_id),
            )
        else:
            cursor = await self._conn.execute(
                """
                SELECT COUNT(*) FROM task_completions
                WHERE space_id = ? AND user_id = ? AND completed_at >= ?
                """,
                (space_id, user_id, encode_ts(since)),
            )
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def last_completion_at(self, space_id: str, user_id: str) -> datetime | None:
        cursor = await self._conn.execute(
            """
            SELECT MAX(completed_at) FROM task_completions
            WHERE space_id = ? AND user_id = ?
            """,
            (space_id, user_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return decode_ts(row[0])
