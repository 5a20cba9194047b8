"""TaskStore SQLite 实现

recurrence 以 JSON 文本保存，读出时经 parse_recurrence 在边界处校验；
批量查询中无法解码的行记录日志后跳过，不影响同批次其余任务。
due_at 与 reminder_sent 总是在同一条 UPDATE 中写入。
"""

from datetime import datetime

import aiosqlite
import structlog
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import RecurrenceValidationError
from ..models.recurrence import dump_recurrence, is_recurring, parse_recurrence
from ..models.task import Task
from .codec import decode_ts, encode_ts

log = structlog.get_logger()

_COLUMNS = (
    "task_id, space_id, title, difficulty, due_at, is_paused, reminder_sent, due_has_time, "
    "recurrence, assignee_scope, assignee_user_id, created_by, created_at, updated_at"
)


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        await self._conn.execute(
            f"INSERT INTO tasks ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                task.task_id,
                task.space_id,
                task.title,
                task.difficulty,
                encode_ts(task.due_at),
                int(task.is_paused),
                int(task.reminder_sent),
                int(task.due_has_time),
                dump_recurrence(task.recurrence),
                task.assignee_scope.value,
                task.assignee_user_id,
                task.created_by,
                encode_ts(task.created_at),
                encode_ts(task.updated_at),
            ),
        )

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def list_tasks_for_space(self, space_id: str) -> list[Task]:
        """空间内任务，按 due_at 升序（无截止时间的排最后）"""
        cursor = await self._conn.execute(
            f"""
            SELECT {_COLUMNS} FROM tasks
            WHERE space_id = ?
            ORDER BY due_at IS NULL, due_at, created_at
            """,
            (space_id,),
        )
        return self._decode_rows(await cursor.fetchall())

    async def list_reminder_candidates(self, due_before: datetime) -> list[Task]:
        """未暂停、本周期未提醒、due_at <= due_before 的任务"""
        cursor = await self._conn.execute(
            f"""
            SELECT {_COLUMNS} FROM tasks
            WHERE is_paused = 0
              AND reminder_sent = 0
              AND due_at IS NOT NULL
              AND due_at <= ?
            ORDER BY due_at
            """,
            (encode_ts(due_before),),
        )
        return self._decode_rows(await cursor.fetchall())

    async def list_expired_recurring(self, now: datetime) -> list[Task]:
        """未暂停、带周期规则且 due_at < now 的任务"""
        cursor = await self._conn.execute(
            f"""
            SELECT {_COLUMNS} FROM tasks
            WHERE is_paused = 0
              AND recurrence IS NOT NULL
              AND due_at IS NOT NULL
              AND due_at < ?
            ORDER BY due_at
            """,
            (encode_ts(now),),
        )
        tasks = self._decode_rows(await cursor.fetchall())
        return [task for task in tasks if is_recurring(task.recurrence)]

    async def reschedule_task(
        self,
        task_id: str,
        due_at: datetime,
        updated_at: datetime,
    ) -> None:
        """写入新的 due_at 并清除 reminder_sent（单条语句）"""
        await self._conn.execute(
            """
            UPDATE tasks
            SET due_at = ?, reminder_sent = 0, updated_at = ?
            WHERE task_id = ?
            """,
            (encode_ts(due_at), encode_ts(updated_at), task_id),
        )

    async def mark_reminder_sent(self, task_id: str, updated_at: datetime) -> None:
        await self._conn.execute(
            "UPDATE tasks SET reminder_sent = 1, updated_at = ? WHERE task_id = ?",
            (encode_ts(updated_at), task_id),
        )

    async def set_paused(self, task_id: str, paused: bool, updated_at: datetime) -> None:
        await self._conn.execute(
            "UPDATE tasks SET is_paused = ?, updated_at = ? WHERE task_id = ?",
            (int(paused), encode_ts(updated_at), task_id),
        )

    async def delete_task(self, task_id: str) -> bool:
        """删除任务，返回是否真的删除了一行"""
        cursor = await self._conn.execute(
            "DELETE FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        return cursor.rowcount > 0

    def _decode_rows(self, rows) -> list[Task]:
        tasks: list[Task] = []
        for row in rows:
            try:
                tasks.append(self._row_to_task(row))
            except (RecurrenceValidationError, PydanticValidationError) as e:
                log.error(
                    "task_row_invalid",
                    task_id=row[0],
                    error_type=type(e).__name__,
                    error=str(e),
                )
        return tasks

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            task_id=row[0],
            space_id=row[1],
            title=row[2],
            difficulty=row[3],
            due_at=decode_ts(row[4]),
            is_paused=bool(row[5]),
            reminder_sent=bool(row[6]),
            due_has_time=bool(row[7]),
            recurrence=parse_recurrence(row[8]),
            assignee_scope=row[9],
            assignee_user_id=row[10],
            created_by=row[11],
            created_at=decode_ts(row[12]),
            updated_at=decode_ts(row[13]),
        )
