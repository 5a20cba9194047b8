"""SQLite 数据库初始化

PRAGMA 配置 + 表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

_USERS_DDL = """
CREATE TABLE IF NOT EXISTS users (
    user_id       TEXT PRIMARY KEY,
    chat_id       TEXT NOT NULL,
    display_name  TEXT NOT NULL DEFAULT ''
);
"""

_SPACES_DDL = """
CREATE TABLE IF NOT EXISTS spaces (
    space_id    TEXT PRIMARY KEY,
    name        TEXT NOT NULL DEFAULT '',
    timezone    TEXT NOT NULL DEFAULT 'UTC',
    created_at  TEXT NOT NULL
);
"""

_SPACE_MEMBERS_DDL = """
CREATE TABLE IF NOT EXISTS space_members (
    space_id   TEXT NOT NULL,
    user_id    TEXT NOT NULL,
    joined_at  TEXT NOT NULL,

    PRIMARY KEY (space_id, user_id),
    FOREIGN KEY (space_id) REFERENCES spaces(space_id) ON DELETE CASCADE,
    FOREIGN KEY (user_id) REFERENCES users(user_id) ON DELETE CASCADE
);
"""

_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id           TEXT PRIMARY KEY,
    space_id          TEXT NOT NULL,
    title             TEXT NOT NULL DEFAULT '',
    difficulty        INTEGER NOT NULL DEFAULT 1,
    due_at            TEXT,
    is_paused         INTEGER NOT NULL DEFAULT 0,
    reminder_sent     INTEGER NOT NULL DEFAULT 0,
    due_has_time      INTEGER NOT NULL DEFAULT 1,
    recurrence        TEXT,
    assignee_scope    TEXT NOT NULL DEFAULT 'user',
    assignee_user_id  TEXT,
    created_by        TEXT NOT NULL,
    created_at        TEXT NOT NULL,
    updated_at        TEXT NOT NULL,

    FOREIGN KEY (space_id) REFERENCES spaces(space_id) ON DELETE CASCADE
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_space_id ON tasks(space_id);",
    # 提醒与过期扫描均按 due_at 范围查询
    "CREATE INDEX IF NOT EXISTS idx_tasks_due_at ON tasks(due_at) WHERE due_at IS NOT NULL;",
]

_STATS_DDL = """
CREATE TABLE IF NOT EXISTS user_space_stats (
    space_id    TEXT NOT NULL,
    user_id     TEXT NOT NULL,
    total_xp    INTEGER NOT NULL DEFAULT 0,
    level       INTEGER NOT NULL DEFAULT 1,
    updated_at  TEXT NOT NULL,

    PRIMARY KEY (space_id, user_id)
);
"""

_STATS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_stats_leaderboard ON user_space_stats(space_id, total_xp DESC);",
]

_LEVEL_REQUIREMENTS_DDL = """
CREATE TABLE IF NOT EXISTS level_requirements (
    space_id     TEXT NOT NULL,
    level        INTEGER NOT NULL,
    xp_required  INTEGER NOT NULL,

    PRIMARY KEY (space_id, level)
);
"""

_REWARDS_DDL = """
CREATE TABLE IF NOT EXISTS rewards (
    space_id  TEXT NOT NULL,
    level     INTEGER NOT NULL,
    text      TEXT NOT NULL,

    PRIMARY KEY (space_id, level)
);
"""

# 完成记录 append-only；任务删除后仍保留，因此不引用 tasks
_COMPLETIONS_DDL = """
CREATE TABLE IF NOT EXISTS task_completions (
    completion_id  TEXT PRIMARY KEY,
    task_id        TEXT NOT NULL,
    space_id       TEXT NOT NULL,
    user_id        TEXT NOT NULL,
    xp             INTEGER NOT NULL,
    completed_at   TEXT NOT NULL
);
"""

_COMPLETIONS_INDEXES = [
    (
        "CREATE INDEX IF NOT EXISTS idx_completions_space_user_ts "
        "ON task_completions(space_id, user_id, completed_at);"
    ),
    "CREATE INDEX IF NOT EXISTS idx_completions_task_id ON task_completions(task_id);",
]

_SETTINGS_DDL = """
CREATE TABLE IF NOT EXISTS notification_settings (
    user_id                TEXT PRIMARY KEY,
    reminders_enabled      INTEGER NOT NULL DEFAULT 1,
    reminder_hours_before  INTEGER NOT NULL DEFAULT 2,
    reminder_time          TEXT NOT NULL DEFAULT '18:00',
    poke_enabled           INTEGER NOT NULL DEFAULT 1
);
"""

_ENGAGEMENT_DDL = """
CREATE TABLE IF NOT EXISTS engagement_states (
    space_id          TEXT NOT NULL,
    user_id           TEXT NOT NULL,
    last_nudge_at     TEXT,
    last_beg_at       TEXT,
    last_reengage_at  TEXT,
    last_reward_at    TEXT,

    PRIMARY KEY (space_id, user_id)
);
"""

_SUMMARIES_DDL = """
CREATE TABLE IF NOT EXISTS weekly_summaries (
    space_id              TEXT NOT NULL,
    user_id               TEXT NOT NULL,
    week_start            TEXT NOT NULL,
    tasks_completed       INTEGER NOT NULL DEFAULT 0,
    levels_gained         INTEGER NOT NULL DEFAULT 0,
    leaderboard_change    INTEGER NOT NULL DEFAULT 0,
    level                 INTEGER NOT NULL DEFAULT 1,
    total_xp              INTEGER NOT NULL DEFAULT 0,
    leaderboard_position  INTEGER NOT NULL DEFAULT 1,
    completions_total     INTEGER NOT NULL DEFAULT 0,
    created_at            TEXT NOT NULL,

    PRIMARY KEY (space_id, user_id, week_start)
);
"""

_TABLES = [
    _USERS_DDL,
    _SPACES_DDL,
    _SPACE_MEMBERS_DDL,
    _TASKS_DDL,
    _STATS_DDL,
    _LEVEL_REQUIREMENTS_DDL,
    _REWARDS_DDL,
    _COMPLETIONS_DDL,
    _SETTINGS_DDL,
    _ENGAGEMENT_DDL,
    _SUMMARIES_DDL,
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    for ddl in _TABLES:
        await conn.execute(ddl)

    for idx_sql in _TASKS_INDEXES + _STATS_INDEXES + _COMPLETIONS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效"""
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
