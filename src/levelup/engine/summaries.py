"""周报生成

week_start 为汇总时区中当前本地日期所在周的周一。
每个 (space, member) 每周最多一条；没有统计记录的成员跳过。
差值基线为此前最近一条周报的快照；没有历史周报时差值全为 0。
"""

from datetime import UTC, date, datetime, timedelta, tzinfo

import structlog
from levelup.core.models.stats import UserSpaceStats
from levelup.core.models.summary import WeeklySummary
from levelup.core.store import StoreGroup
from levelup.core.timezone import local_date

log = structlog.get_logger()


def week_start_for(day: date) -> date:
    """本周周一"""
    return day - timedelta(days=day.weekday())


def leaderboard_position(ranking: list[UserSpaceStats], user_id: str) -> int:
    """1 起始名次；不在榜上时排在末尾之后"""
    for index, stats in enumerate(ranking):
        if stats.user_id == user_id:
            return index + 1
    return len(ranking) + 1


async def generate_weekly_summaries(
    stores: StoreGroup,
    zone: tzinfo,
    now: datetime | None = None,
) -> int:
    """为所有空间成员生成本周周报

    Returns:
        新写入的周报数
    """
    now = now or datetime.now(UTC)
    week_start = week_start_for(local_date(now, zone))
    generated = 0

    rankings: dict[str, list[UserSpaceStats]] = {}
    for member in await stores.space_store.list_memberships():
        try:
            if member.space_id not in rankings:
                rankings[member.space_id] = await stores.stats_store.list_stats_for_space(
                    member.space_id
                )
            created = await _summarize_member(
                stores,
                member.space_id,
                member.user_id,
                week_start,
                rankings[member.space_id],
                now,
            )
            if created:
                generated += 1
        except Exception as e:
            log.error(
                "weekly_summary_failed",
                space_id=member.space_id,
                user_id=member.user_id,
                error_type=type(e).__name__,
                error=str(e),
            )

    log.info(
        "weekly_summaries_completed",
        week_start=week_start.isoformat(),
        generated=generated,
    )
    return generated


async def _summarize_member(
    stores: StoreGroup,
    space_id: str,
    user_id: str,
    week_start: date,
    ranking: list[UserSpaceStats],
    now: datetime,
) -> bool:
    existing = await stores.summary_store.get_summary(space_id, user_id, week_start)
    if existing is not None:
        return False

    current = next((s for s in ranking if s.user_id == user_id), None)
    if current is None:
        log.debug("weekly_summary_no_stats", space_id=space_id, user_id=user_id)
        return False

    position = leaderboard_position(ranking, user_id)
    completions_total = await stores.completion_store.count_completions(space_id, user_id)
    previous = await stores.summary_store.get_previous_summary(space_id, user_id, week_start)

    if previous is None:
        tasks_completed = 0
        levels_gained = 0
        leaderboard_change = 0
    else:
        tasks_completed = max(0, completions_total - previous.completions_total)
        levels_gained = max(0, current.level - previous.level)
        leaderboard_change = previous.leaderboard_position - position

    summary = WeeklySummary(
        space_id=space_id,
        user_id=user_id,
        week_start=week_start,
        tasks_completed=tasks_completed,
        levels_gained=levels_gained,
        leaderboard_change=leaderboard_change,
        level=current.level,
        total_xp=current.total_xp,
        leaderboard_position=position,
        completions_total=completions_total,
        created_at=now,
    )
    created = await stores.summary_store.save_summary(summary)
    await stores.conn.commit()
    return created
