"""SpaceStore SQLite 实现 -- 用户、空间与成员关系"""

from datetime import datetime

import aiosqlite

from ..models.space import Space, SpaceMember, User
from ..timezone import resolve_zone
from .codec import decode_ts, encode_ts


class SqliteSpaceStore:
    """SpaceStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def save_user(self, user: User) -> None:
        """创建或更新用户"""
        await self._conn.execute(
            """
            INSERT INTO users (user_id, chat_id, display_name)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                chat_id = excluded.chat_id,
                display_name = excluded.display_name
            """,
            (user.user_id, user.chat_id, user.display_name),
        )

    async def get_user(self, user_id: str) -> User | None:
        cursor = await self._conn.execute(
            "SELECT user_id, chat_id, display_name FROM users WHERE user_id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return User(user_id=row[0], chat_id=row[1], display_name=row[2])

    async def create_space(self, space: Space) -> None:
        """创建空间

        Raises:
            InvalidTimezoneError: 时区标识非法
        """
        resolve_zone(space.timezone)
        await self._conn.execute(
            "INSERT INTO spaces (space_id, name, timezone, created_at) VALUES (?, ?, ?, ?)",
            (space.space_id, space.name, space.timezone, encode_ts(space.created_at)),
        )

    async def get_space(self, space_id: str) -> Space | None:
        cursor = await self._conn.execute(
            "SELECT space_id, name, timezone, created_at FROM spaces WHERE space_id = ?",
            (space_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return Space(
            space_id=row[0],
            name=row[1],
            timezone=row[2],
            created_at=decode_ts(row[3]),
        )

    async def list_spaces(self) -> list[Space]:
        cursor = await self._conn.execute(
            "SELECT space_id, name, timezone, created_at FROM spaces ORDER BY created_at"
        )
        rows = await cursor.fetchall()
        return [
            Space(space_id=r[0], name=r[1], timezone=r[2], created_at=decode_ts(r[3]))
            for r in rows
        ]

    async def add_member(self, space_id: str, user_id: str, joined_at: datetime) -> None:
        """加入空间（重复加入忽略）"""
        await self._conn.execute(
            """
            INSERT INTO space_members (space_id, user_id, joined_at)
            VALUES (?, ?, ?)
            ON CONFLICT(space_id, user_id) DO NOTHING
            """,
            (space_id, user_id, encode_ts(joined_at)),
        )

    async def list_member_ids(self, space_id: str) -> list[str]:
        """空间成员 user_id，按加入时间排序"""
        cursor = await self._conn.execute(
            "SELECT user_id FROM space_members WHERE space_id = ? ORDER BY joined_at, user_id",
            (space_id,),
        )
        rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def list_memberships(self) -> list[SpaceMember]:
        """全部成员关系（活跃度与周报任务遍历使用）"""
        cursor = await self._conn.execute(
            "SELECT space_id, user_id, joined_at FROM space_members ORDER BY space_id, user_id"
        )
        rows = await cursor.fetchall()
        return [
            SpaceMember(space_id=r[0], user_id=r[1], joined_at=decode_ts(r[2]))
            for r in rows
        ]
