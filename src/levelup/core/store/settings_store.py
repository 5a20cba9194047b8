"""SettingsStore SQLite 实现 -- 通知设置与活跃度状态

读取时缺失的记录返回默认值，不会写入数据库。
"""

from datetime import datetime, time

import aiosqlite

from ..models.enums import EngagementTier
from ..models.notification import EngagementState, NotificationSettings
from .codec import decode_ts, encode_ts

# record_engagement 可写入的列（白名单，列名不来自外部输入）
_ENGAGEMENT_COLUMNS = {
    EngagementTier.NUDGE: "last_nudge_at",
    EngagementTier.BEG: "last_beg_at",
    EngagementTier.REENGAGE: "last_reengage_at",
    "reward": "last_reward_at",
}


class SqliteSettingsStore:
    """SettingsStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def get_settings(self, user_id: str) -> NotificationSettings:
        cursor = await self._conn.execute(
            """
            SELECT reminders_enabled, reminder_hours_before, poke_enabled, reminder_time
            FROM notification_settings
            WHERE user_id = ?
            """,
            (user_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return NotificationSettings(user_id=user_id)
        return NotificationSettings(
            user_id=user_id,
            reminders_enabled=bool(row[0]),
            reminder_hours_before=row[1],
            poke_enabled=bool(row[2]),
            reminder_time=time.fromisoformat(row[3]),
        )

    async def save_settings(self, settings: NotificationSettings) -> None:
        await self._conn.execute(
            """
            INSERT INTO notification_settings
                (user_id, reminders_enabled, reminder_hours_before, poke_enabled, reminder_time)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                reminders_enabled = excluded.reminders_enabled,
                reminder_hours_before = excluded.reminder_hours_before,
                poke_enabled = excluded.poke_enabled,
                reminder_time = excluded.reminder_time
            """,
            (
                settings.user_id,
                int(settings.reminders_enabled),
                settings.reminder_hours_before,
                int(settings.poke_enabled),
                settings.reminder_time.strftime("%H:%M"),
            ),
        )

    async def max_reminder_hours_before(self) -> int | None:
        """所有已保存设置中最大的提醒提前量，没有记录时返回 None"""
        cursor = await self._conn.execute(
            "SELECT MAX(reminder_hours_before) FROM notification_settings"
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    async def get_engagement_state(self, space_id: str, user_id: str) -> EngagementState:
        cursor = await self._conn.execute(
            """
            SELECT last_nudge_at, last_beg_at, last_reengage_at, last_reward_at
            FROM engagement_states
            WHERE space_id = ? AND user_id = ?
            """,
            (space_id, user_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return EngagementState(space_id=space_id, user_id=user_id)
        return EngagementState(
            space_id=space_id,
            user_id=user_id,
            last_nudge_at=decode_ts(row[0]),
            last_beg_at=decode_ts(row[1]),
            last_reengage_at=decode_ts(row[2]),
            last_reward_at=decode_ts(row[3]),
        )

    async def record_engagement(
        self,
        space_id: str,
        user_id: str,
        kind: EngagementTier | str,
        sent_at: datetime,
    ) -> None:
        """记录某分层（或 "reward"）的最后发送时间"""
        column = _ENGAGEMENT_COLUMNS[kind]
        await self._conn.execute(
            f"""
            INSERT INTO engagement_states (space_id, user_id, {column})
            VALUES (?, ?, ?)
            ON CONFLICT(space_id, user_id) DO UPDATE SET {column} = excluded.{column}
            """,
            (space_id, user_id, encode_ts(sent_at)),
        )
