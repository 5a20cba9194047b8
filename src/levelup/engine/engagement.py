"""活跃度提醒与高活跃奖励

按距上次完成的时间分层，从最严重到最轻依次检查，每个 (space, user) 每次最多触发一个分层：
    >= 14 天 reengage（冷却 7 天）
    >= 7 天  beg（冷却 3 天）
    >= 3 天  nudge（冷却 1 天）
另外对最近 24 小时完成 >= 5 次的用户奖励 XP（冷却 24 小时）。
所有发送都遵守 reminders_enabled 设置。
"""

from datetime import UTC, datetime, timedelta

import structlog
from levelup.core import config
from levelup.core.models.enums import EngagementTier
from levelup.core.models.results import EngagementRunResult
from levelup.core.models.stats import UserSpaceStats
from levelup.core.store import StoreGroup
from levelup.notify import messages

from .ledger import XpLedger
from .notifier import Notifier

log = structlog.get_logger()

# (分层, 不活跃阈值, 冷却)，按严重程度降序
TIERS: tuple[tuple[EngagementTier, timedelta, timedelta], ...] = (
    (
        EngagementTier.REENGAGE,
        timedelta(days=config.REENGAGE_AFTER_DAYS),
        timedelta(days=config.REENGAGE_COOLDOWN_DAYS),
    ),
    (
        EngagementTier.BEG,
        timedelta(days=config.BEG_AFTER_DAYS),
        timedelta(days=config.BEG_COOLDOWN_DAYS),
    ),
    (
        EngagementTier.NUDGE,
        timedelta(days=config.NUDGE_AFTER_DAYS),
        timedelta(days=config.NUDGE_COOLDOWN_DAYS),
    ),
)

_COUNTER_FIELDS = {
    EngagementTier.REENGAGE: "reengages_sent",
    EngagementTier.BEG: "begs_sent",
    EngagementTier.NUDGE: "nudges_sent",
}


def classify_inactivity(inactive_for: timedelta) -> tuple[EngagementTier, timedelta] | None:
    """不活跃时长 -> (分层, 冷却)，不足 3 天返回 None"""
    for tier, threshold, cooldown in TIERS:
        if inactive_for >= threshold:
            return tier, cooldown
    return None


class EngagementService:
    """活跃度任务"""

    def __init__(
        self,
        store_group: StoreGroup,
        ledger: XpLedger,
        notifier: Notifier,
    ) -> None:
        self._stores = store_group
        self._ledger = ledger
        self._notifier = notifier

    async def send_engagement_notifications(
        self,
        now: datetime | None = None,
    ) -> EngagementRunResult:
        """单次活跃度扫描"""
        now = now or datetime.now(UTC)
        result = EngagementRunResult()
        all_stats = await self._stores.stats_store.list_all_stats()

        for stats in all_stats:
            try:
                settings = await self._stores.settings_store.get_settings(stats.user_id)
                if not settings.reminders_enabled:
                    continue
                tier = await self._maybe_send_tier(stats, now)
                if tier is not None:
                    field = _COUNTER_FIELDS[tier]
                    setattr(result, field, getattr(result, field) + 1)
                if await self._maybe_reward(stats, now):
                    result.rewards_granted += 1
            except Exception as e:
                log.error(
                    "engagement_user_failed",
                    space_id=stats.space_id,
                    user_id=stats.user_id,
                    error_type=type(e).__name__,
                    error=str(e),
                )

        log.info(
            "engagement_run_completed",
            nudges_sent=result.nudges_sent,
            begs_sent=result.begs_sent,
            reengages_sent=result.reengages_sent,
            rewards_granted=result.rewards_granted,
        )
        return result

    async def _maybe_send_tier(
        self,
        stats: UserSpaceStats,
        now: datetime,
    ) -> EngagementTier | None:
        """按不活跃分层发送一条提醒；投递成功才记录发送时间"""
        last_completion = await self._stores.completion_store.last_completion_at(
            stats.space_id, stats.user_id
        )
        classified = classify_inactivity(now - (last_completion or stats.updated_at))
        if classified is None:
            return None

        tier, cooldown = classified
        state = await self._stores.settings_store.get_engagement_state(
            stats.space_id, stats.user_id
        )
        last_sent = state.last_sent(tier)
        if last_sent is not None and now - last_sent <= cooldown:
            return None

        if not await self._notifier.notify_user(stats.user_id, messages.engagement(tier)):
            return None

        await self._stores.settings_store.record_engagement(
            stats.space_id, stats.user_id, tier, now
        )
        await self._stores.conn.commit()
        return tier

    async def _maybe_reward(self, stats: UserSpaceStats, now: datetime) -> bool:
        """最近 24 小时完成次数达到阈值时奖励 XP"""
        since = now - timedelta(hours=24)
        recent = await self._stores.completion_store.count_completions(
            stats.space_id, stats.user_id, since=since
        )
        if recent < config.STREAK_COMPLETIONS_THRESHOLD:
            return False

        state = await self._stores.settings_store.get_engagement_state(
            stats.space_id, stats.user_id
        )
        cooldown = timedelta(hours=config.STREAK_REWARD_COOLDOWN_HOURS)
        if state.last_reward_at is not None and now - state.last_reward_at < cooldown:
            return False

        award = await self._ledger.apply(
            stats.space_id, stats.user_id, config.STREAK_REWARD_XP, now=now
        )
        await self._stores.settings_store.record_engagement(
            stats.space_id, stats.user_id, "reward", now
        )
        await self._stores.conn.commit()

        await self._notifier.notify_user(
            stats.user_id, messages.streak_reward(config.STREAK_REWARD_XP)
        )
        if award.level_up:
            reward = await self._stores.stats_store.get_reward(stats.space_id, award.new_level)
            await self._notifier.notify_user(
                stats.user_id,
                messages.level_up(award.new_level, reward.text if reward else None),
            )
        log.info(
            "streak_reward_granted",
            space_id=stats.space_id,
            user_id=stats.user_id,
            xp=config.STREAK_REWARD_XP,
            recent_completions=recent,
        )
        return True
