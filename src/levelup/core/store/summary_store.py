"""SummaryStore SQLite 实现 -- 每周一条 (space, user, week_start) 记录"""

from datetime import date

import aiosqlite

from ..models.summary import WeeklySummary
from .codec import decode_date, decode_ts, encode_date, encode_ts

_COLUMNS = (
    "space_id, user_id, week_start, tasks_completed, levels_gained, leaderboard_change, "
    "level, total_xp, leaderboard_position, completions_total, created_at"
)


class SqliteSummaryStore:
    """SummaryStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def get_summary(
        self,
        space_id: str,
        user_id: str,
        week_start: date,
    ) -> WeeklySummary | None:
        cursor = await self._conn.execute(
            f"""
            SELECT {_COLUMNS} FROM weekly_summaries
            WHERE space_id = ? AND user_id = ? AND week_start = ?
            """,
            (space_id, user_id, encode_date(week_start)),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_summary(row)

    async def get_previous_summary(
        self,
        space_id: str,
        user_id: str,
        week_start: date,
    ) -> WeeklySummary | None:
        """week_start 之前最近的一条周报（差值基线）"""
        cursor = await self._conn.execute(
            f"""
            SELECT {_COLUMNS} FROM weekly_summaries
            WHERE space_id = ? AND user_id = ? AND week_start < ?
            ORDER BY week_start DESC
            LIMIT 1
            """,
            (space_id, user_id, encode_date(week_start)),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_summary(row)

    async def save_summary(self, summary: WeeklySummary) -> bool:
        """写入周报，已存在时忽略；返回是否新写入"""
        cursor = await self._conn.execute(
            f"""
            INSERT INTO weekly_summaries ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(space_id, user_id, week_start) DO NOTHING
            """,
            (
                summary.space_id,
                summary.user_id,
                encode_date(summary.week_start),
                summary.tasks_completed,
                summary.levels_gained,
                summary.leaderboard_change,
                summary.level,
                summary.total_xp,
                summary.leaderboard_position,
                summary.completions_total,
                encode_ts(summary.created_at),
            ),
        )
        return cursor.rowcount > 0

    async def list_for_week(self, week_start: date) -> list[WeeklySummary]:
        cursor = await self._conn.execute(
            f"""
            SELECT {_COLUMNS} FROM weekly_summaries
            WHERE week_start = ?
            ORDER BY space_id, leaderboard_position
            """,
            (encode_date(week_start),),
        )
        rows = await cursor.fetchall()
        return [self._row_to_summary(row) for row in rows]

    @staticmethod
    def _row_to_summary(row: aiosqlite.Row) -> WeeklySummary:
        return WeeklySummary(
            space_id=row[0],
            user_id=row[1],
            week_start=decode_date(row[2]),
            tasks_completed=row[3],
            levels_gained=row[4],
            leaderboard_change=row[5],
            level=row[6],
            total_xp=row[7],
            leaderboard_position=row[8],
            completions_total=row[9],
            created_at=decode_ts(row[10]),
        )
