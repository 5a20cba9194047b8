"""任务提醒

查找窗口 = 所有用户中最大的提醒提前量（至少 48 小时，覆盖前一天提醒），
包含已逾期任务。接收人按以下规则判断是否提醒：

- 已逾期：立即提醒
- 无具体时刻的任务：截止日前一天的本地 reminder_time 之后提醒
- 其余：距截止在 (0, 提前量] 小时内提醒，提前量为 0 时使用默认值

至少一次投递成功后才设置 reminder_sent，保证每个截止周期最多提醒一次。
"""

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import structlog
from levelup.core.config import DEFAULT_REMINDER_HOURS_BEFORE, REMINDER_MIN_HORIZON_HOURS
from levelup.core.exceptions import NotFoundError
from levelup.core.models.enums import AssigneeScope
from levelup.core.models.notification import NotificationSettings
from levelup.core.models.results import ReminderRunResult
from levelup.core.models.task import Task
from levelup.core.store import StoreGroup
from levelup.core.timezone import local_date, make_local, resolve_zone
from levelup.notify import messages

from .notifier import Notifier

log = structlog.get_logger()


async def _recipients(stores: StoreGroup, task: Task) -> list[str]:
    if task.assignee_scope == AssigneeScope.SPACE:
        return await stores.space_store.list_member_ids(task.space_id)
    return [task.resolve_assignee()]


async def _space_zone(stores: StoreGroup, space_id: str) -> ZoneInfo:
    space = await stores.space_store.get_space(space_id)
    if space is None:
        raise NotFoundError("space", space_id)
    return resolve_zone(space.timezone)


async def _reminder_due(
    stores: StoreGroup,
    task: Task,
    settings: NotificationSettings,
    now: datetime,
) -> tuple[bool, bool]:
    """返回 (是否提醒, 是否为前一天提醒)"""
    hours_to_due = (task.due_at - now).total_seconds() / 3600
    if hours_to_due <= 0:
        return True, False

    if not task.has_due_time:
        zone = await _space_zone(stores, task.space_id)
        due_date = local_date(task.due_at, zone)
        remind_at = make_local(due_date - timedelta(days=1), settings.reminder_time, zone)
        if now < remind_at:
            return False, False
        return True, local_date(now, zone) < due_date

    lead = settings.reminder_hours_before or DEFAULT_REMINDER_HOURS_BEFORE
    return hours_to_due <= lead, False


async def _remind_recipient(
    stores: StoreGroup,
    notifier: Notifier,
    task: Task,
    user_id: str,
    now: datetime,
) -> bool:
    """向单个接收人发送提醒（如需要），返回是否投递成功"""
    settings = await stores.settings_store.get_settings(user_id)
    if not settings.reminders_enabled:
        return False

    should_remind, day_before = await _reminder_due(stores, task, settings, now)
    if not should_remind:
        return False

    user = await stores.space_store.get_user(user_id)
    if user is None:
        return False

    text = messages.task_reminder(
        task.title,
        overdue=task.due_at <= now,
        recurring=task.is_recurring,
        recipient_name=user.display_name or None,
        day_before=day_before,
    )
    return await notifier.send(user, text)


async def send_task_reminders(
    stores: StoreGroup,
    notifier: Notifier,
    now: datetime | None = None,
) -> ReminderRunResult:
    """单次提醒扫描

    单个任务失败（接收人查询、投递等）只记录日志，不影响其他任务。

    Returns:
        ReminderRunResult{reminders_sent, considered_tasks, horizon_hours}
    """
    now = now or datetime.now(UTC)
    max_saved = await stores.settings_store.max_reminder_hours_before()
    horizon_hours = max(REMINDER_MIN_HORIZON_HOURS, DEFAULT_REMINDER_HOURS_BEFORE, max_saved or 0)

    tasks = await stores.task_store.list_reminder_candidates(now + timedelta(hours=horizon_hours))
    reminders_sent = 0

    for task in tasks:
        try:
            sent_to_any = False
            for user_id in await _recipients(stores, task):
                if await _remind_recipient(stores, notifier, task, user_id, now):
                    sent_to_any = True

            if not sent_to_any:
                continue

            await stores.task_store.mark_reminder_sent(task.task_id, now)
            await stores.conn.commit()
            reminders_sent += 1
        except Exception as e:
            log.error(
                "task_reminder_failed",
                task_id=task.task_id,
                error_type=type(e).__name__,
                error=str(e),
            )

    log.info(
        "task_reminders_completed",
        reminders_sent=reminders_sent,
        considered_tasks=len(tasks),
        horizon_hours=horizon_hours,
    )
    return ReminderRunResult(
        reminders_sent=reminders_sent,
        considered_tasks=len(tasks),
        horizon_hours=horizon_hours,
    )
