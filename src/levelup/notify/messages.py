"""用户可见的消息文案（HTML 解析模式）

任务标题等用户输入统一经 html.escape 转义。
提醒文案随机挑选一条变体，可注入 random.Random 以便测试。
"""

import html
import random

_REMINDER_UPCOMING = (
    "{name}Heads up: <b>{title}</b> is due soon. Don't forget!{suffix}",
    "{name}Small ping: <b>{title}</b> is waiting for you.{suffix}",
    "{name}Reminder: <b>{title}</b> is coming up. No stress, just a nudge.{suffix}",
)

_REMINDER_OVERDUE = (
    "{name}Where are you? <b>{title}</b> is already overdue.{suffix}",
    "{name}Friendly reminder: <b>{title}</b> is overdue. Let's wrap it up?{suffix}",
    "{name}Hey! <b>{title}</b> is overdue. Don't put it off.{suffix}",
)

_REMINDER_DAY_BEFORE = (
    "{name}Tomorrow you have <b>{title}</b>. Don't forget!{suffix}",
    "{name}Heads up for tomorrow: <b>{title}</b> is due.{suffix}",
)

_ENGAGEMENT = {
    "reengage": "Regular tasks build success. Start with just one today!",
    "beg": "I really miss your tasks. How about doing just one?",
    "nudge": "It's been a while since your last task. One small step today and the progress is back.",
}


def _name_prefix(recipient_name: str | None) -> str:
    return f"{html.escape(recipient_name)}! " if recipient_name else ""


def task_reminder(
    title: str,
    overdue: bool,
    recurring: bool = False,
    recipient_name: str | None = None,
    rng: random.Random | None = None,
    day_before: bool = False,
) -> str:
    """截止前提醒 / 前一天提醒 / 逾期提醒"""
    if overdue:
        templates = _REMINDER_OVERDUE
    elif day_before:
        templates = _REMINDER_DAY_BEFORE
    else:
        templates = _REMINDER_UPCOMING
    template = (rng or random).choice(templates)
    return template.format(
        name=_name_prefix(recipient_name),
        title=html.escape(title),
        suffix=" (repeats)" if recurring else "",
    )


def task_completed(title: str, xp: int) -> str:
    return f"Task <b>{html.escape(title)}</b> completed! +{xp} XP"


def level_up(new_level: int, reward_text: str | None = None) -> str:
    text = f"Congratulations! You reached level {new_level}."
    if reward_text:
        text += f"\nReward unlocked: <b>{html.escape(reward_text)}</b>"
    return text


def engagement(tier: str) -> str:
    """按不活跃分层返回文案（reengage / beg / nudge）"""
    return _ENGAGEMENT[tier]


def streak_reward(xp: int) -> str:
    return f"You're on fire with your tasks! +{xp} XP bonus."


def poke(from_name: str) -> str:
    return f"You were poked by <b>{html.escape(from_name)}</b>! Don't forget your tasks!"


def assignee_added(task_title: str, space_name: str, actor_name: str) -> str:
    return (
        f"You were assigned to task <b>{html.escape(task_title)}</b> "
        f"in space <b>{html.escape(space_name)}</b>. "
        f"Initiator: <b>{html.escape(actor_name)}</b>"
    )


def assignee_removed(task_title: str, space_name: str, actor_name: str) -> str:
    return (
        f"You were unassigned from task <b>{html.escape(task_title)}</b> "
        f"in space <b>{html.escape(space_name)}</b>. "
        f"Initiator: <b>{html.escape(actor_name)}</b>"
    )
