"""TaskLifecycleService -- 任务完成与过期处理

完成流程：
1. 加载任务（不存在 -> NotFoundError）
2. 一次性任务先删除行以认领本次完成（未删除任何行 -> InvalidStateError）；
   周期任务先计算下一次截止时间
3. 解析接收人，逐个发放 XP + 追加完成记录（同一事务），再尽力发送通知
4. 只向调用方返回请求者自身的结果
5. 周期任务写入新的 due_at 并清除 reminder_sent

过期扫描：对每个已过期的周期任务扣除创建者 task.xp // 2（不低于 0），
再按完成流程相同的规则重新排期；单个任务的失败不影响其余任务。
"""

from datetime import UTC, datetime

import structlog
from levelup.core.exceptions import InvalidStateError, NotFoundError
from levelup.core.models.enums import AssigneeScope
from levelup.core.models.results import CompletionOutcome, ExpirationResult
from levelup.core.models.stats import TaskCompletionRecord
from levelup.core.models.task import Task
from levelup.core.recurrence import next_cycle_due_date
from levelup.core.store import StoreGroup
from levelup.notify import messages
from ulid import ULID

from .ledger import XpLedger
from .notifier import Notifier

log = structlog.get_logger()


class TaskLifecycleService:
    """任务生命周期编排"""

    def __init__(
        self,
        store_group: StoreGroup,
        ledger: XpLedger,
        notifier: Notifier,
    ) -> None:
        self._stores = store_group
        self._ledger = ledger
        self._notifier = notifier

    async def _space_timezone(self, space_id: str) -> str:
        space = await self._stores.space_store.get_space(space_id)
        if space is None:
            raise NotFoundError("space", space_id)
        return space.timezone

    async def _resolve_recipients(self, task: Task, requesting_user_id: str) -> list[str]:
        """整空间任务 -> 全部成员（无成员时仅请求者）；单人任务 -> 执行人或创建者"""
        if task.assignee_scope == AssigneeScope.SPACE:
            members = await self._stores.space_store.list_member_ids(task.space_id)
            return members or [requesting_user_id]
        return [task.resolve_assignee()]

    async def complete_task(
        self,
        task_id: str,
        requesting_user_id: str,
        now: datetime | None = None,
    ) -> CompletionOutcome:
        """完成任务

        Returns:
            请求者的 CompletionOutcome；请求者不在接收人中时为中性结果

        Raises:
            NotFoundError: 任务或空间不存在
            InvalidStateError: 一次性任务已被其他请求完成
        """
        now = now or datetime.now(UTC)
        task = await self._stores.task_store.get_task(task_id)
        if task is None:
            raise NotFoundError("task", task_id)

        next_due: datetime | None = None
        if task.is_recurring:
            timezone = await self._space_timezone(task.space_id)
            next_due = next_cycle_due_date(task.recurrence, timezone, now)
        else:
            deleted = await self._stores.task_store.delete_task(task_id)
            await self._stores.conn.commit()
            if not deleted:
                raise InvalidStateError(f"任务已完成: {task_id}")

        recipients = await self._resolve_recipients(task, requesting_user_id)
        outcome: CompletionOutcome | None = None

        for user_id in recipients:
            record = TaskCompletionRecord(
                completion_id=str(ULID()),
                task_id=task.task_id,
                space_id=task.space_id,
                user_id=user_id,
                xp=task.xp,
                completed_at=now,
            )
            result = await self._ledger.apply(
                task.space_id, user_id, task.xp, completion=record, now=now
            )
            await self._announce(task, user_id, result.level_up, result.new_level)

            if user_id == requesting_user_id:
                outcome = CompletionOutcome(
                    level_up=result.level_up,
                    new_level=result.new_level,
                    xp_awarded=task.xp,
                )

        if outcome is None:
            stats = await self._stores.stats_store.get_stats(task.space_id, requesting_user_id)
            outcome = CompletionOutcome(
                level_up=False,
                new_level=stats.level if stats else 1,
                xp_awarded=0,
            )

        if next_due is not None:
            await self._stores.task_store.reschedule_task(task_id, next_due, now)
            await self._stores.conn.commit()

        outcome = outcome.model_copy(
            update={"recipients": len(recipients), "rescheduled": next_due is not None}
        )
        log.info(
            "task_completed",
            task_id=task_id,
            space_id=task.space_id,
            requesting_user_id=requesting_user_id,
            recipients=len(recipients),
            xp=task.xp,
            next_due_at=next_due.isoformat() if next_due else None,
        )
        return outcome

    async def _announce(self, task: Task, user_id: str, level_up: bool, new_level: int) -> None:
        """完成通知 + 升级通知（含奖励文本），均为尽力而为"""
        await self._notifier.notify_user(user_id, messages.task_completed(task.title, task.xp))
        if not level_up:
            return
        reward = await self._stores.stats_store.get_reward(task.space_id, new_level)
        await self._notifier.notify_user(
            user_id,
            messages.level_up(new_level, reward.text if reward else None),
        )

    async def process_expired_recurring_tasks(
        self,
        now: datetime | None = None,
    ) -> ExpirationResult:
        """过期扫描

        Returns:
            ExpirationResult{expired, rescheduled, deleted}
        """
        now = now or datetime.now(UTC)
        tasks = await self._stores.task_store.list_expired_recurring(now)
        result = ExpirationResult()
        if not tasks:
            return result

        for task in tasks:
            try:
                outcome = await self._expire_one(task, now)
            except Exception as e:
                log.error(
                    "expire_task_failed",
                    task_id=task.task_id,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                continue
            penalized, rescheduled = outcome
            if penalized:
                result.expired += 1
            if rescheduled:
                result.rescheduled += 1
            else:
                result.deleted += 1

        log.info(
            "expiration_sweep_completed",
            candidates=len(tasks),
            expired=result.expired,
            rescheduled=result.rescheduled,
            deleted=result.deleted,
        )
        return result

    async def _expire_one(self, task: Task, now: datetime) -> tuple[bool, bool]:
        """处理单个过期任务，返回 (是否扣除惩罚, 是否重新排期)

        先计算下一次截止时间，时区等配置错误时不扣除惩罚。
        """
        timezone = await self._space_timezone(task.space_id)
        next_due = next_cycle_due_date(task.recurrence, timezone, now)

        penalized = False
        penalty = task.xp // 2
        if penalty > 0:
            stats = await self._stores.stats_store.get_stats(task.space_id, task.created_by)
            if stats is not None:
                await self._ledger.apply(task.space_id, task.created_by, -penalty, now=now)
                penalized = True
                log.info(
                    "task_expired_penalty",
                    task_id=task.task_id,
                    user_id=task.created_by,
                    penalty=penalty,
                )

        if next_due is None:
            await self._stores.task_store.delete_task(task.task_id)
            await self._stores.conn.commit()
            log.info("expired_task_deleted", task_id=task.task_id)
            return penalized, False

        await self._stores.task_store.reschedule_task(task.task_id, next_due, now)
        await self._stores.conn.commit()
        return penalized, True
