"""StatsStore SQLite 实现 -- XP 统计、等级需求表与奖励"""

import aiosqlite

from ..models.stats import LevelRequirement, Reward, UserSpaceStats
from .codec import decode_ts, encode_ts


class SqliteStatsStore:
    """StatsStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def get_stats(self, space_id: str, user_id: str) -> UserSpaceStats | None:
        cursor = await self._conn.execute(
            """
            SELECT space_id, user_id, total_xp, level, updated_at
            FROM user_space_stats
            WHERE space_id = ? AND user_id = ?
            """,
            (space_id, user_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_stats(row)

    async def upsert_stats(self, stats: UserSpaceStats) -> None:
        """total_xp 与 level 在同一条语句中写入"""
        await self._conn.execute(
            """
            INSERT INTO user_space_stats (space_id, user_id, total_xp, level, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(space_id, user_id) DO UPDATE SET
                total_xp = excluded.total_xp,
                level = excluded.level,
                updated_at = excluded.updated_at
            """,
            (
                stats.space_id,
                stats.user_id,
                stats.total_xp,
                stats.level,
                encode_ts(stats.updated_at),
            ),
        )

    async def list_stats_for_space(self, space_id: str) -> list[UserSpaceStats]:
        """排行榜顺序：total_xp 降序，同分按 user_id"""
        cursor = await self._conn.execute(
            """
            SELECT space_id, user_id, total_xp, level, updated_at
            FROM user_space_stats
            WHERE space_id = ?
            ORDER BY total_xp DESC, user_id
            """,
            (space_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_stats(row) for row in rows]

    async def list_all_stats(self) -> list[UserSpaceStats]:
        """全部 (space, user) 统计行（活跃度任务遍历使用）"""
        cursor = await self._conn.execute(
            """
            SELECT space_id, user_id, total_xp, level, updated_at
            FROM user_space_stats
            ORDER BY space_id, user_id
            """
        )
        rows = await cursor.fetchall()
        return [self._row_to_stats(row) for row in rows]

    async def get_level_requirements(self, space_id: str) -> dict[int, int]:
        """空间自定义等级需求表 {level: xp_required}"""
        cursor = await self._conn.execute(
            "SELECT level, xp_required FROM level_requirements WHERE space_id = ?",
            (space_id,),
        )
        rows = await cursor.fetchall()
        return {row[0]: row[1] for row in rows}

    async def set_level_requirement(self, requirement: LevelRequirement) -> None:
        await self._conn.execute(
            """
            INSERT INTO level_requirements (space_id, level, xp_required)
            VALUES (?, ?, ?)
            ON CONFLICT(space_id, level) DO UPDATE SET xp_required = excluded.xp_required
            """,
            (requirement.space_id, requirement.level, requirement.xp_required),
        )

    async def get_reward(self, space_id: str, level: int) -> Reward | None:
        cursor = await self._conn.execute(
            "SELECT space_id, level, text FROM rewards WHERE space_id = ? AND level = ?",
            (space_id, level),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return Reward(space_id=row[0], level=row[1], text=row[2])

    async def set_reward(self, reward: Reward) -> None:
        await self._conn.execute(
            """
            INSERT INTO rewards (space_id, level, text)
            VALUES (?, ?, ?)
            ON CONFLICT(space_id, level) DO UPDATE SET text = excluded.text
            """,
            (reward.space_id, reward.level, reward.text),
        )

    @staticmethod
    def _row_to_stats(row: aiosqlite.Row) -> UserSpaceStats:
        return UserSpaceStats(
            space_id=row[0],
            user_id=row[1],
            total_xp=row[2],
            level=row[3],
            updated_at=decode_ts(row[4]),
        )
