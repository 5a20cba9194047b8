"""过期周期任务扫描测试

测试内容：
1. 扣除创建者 task.xp // 2，total_xp 不低于 0
2. 过期任务重新排期，不会在下一次扫描重复扣分
3. 无统计记录时不扣分
4. 单个任务失败（含存储的规则损坏）不影响其余任务，且不扣分
"""

from datetime import UTC, datetime, timedelta

from levelup.core.models import DailyRule, WeeklyRule

NOW = datetime(2024, 3, 5, 12, 0, tzinfo=UTC)
PAST = NOW - timedelta(hours=3)


class TestExpirationPenalty:
    async def test_half_xp_penalty(self, store_group, seed, lifecycle):
        await seed.space(members=("alice",))
        await seed.stats("space-1", "alice", 30)
        await seed.task(recurrence=DailyRule(), due_at=PAST, difficulty=3)

        result = await lifecycle.process_expired_recurring_tasks(now=NOW)

        assert result.expired == 1
        assert result.rescheduled == 1
        assert result.deleted == 0
        stats = await store_group.stats_store.get_stats("space-1", "alice")
        assert stats.total_xp == 15

    async def test_penalty_clamped_at_zero(self, store_group, seed, lifecycle):
        await seed.space(members=("alice",))
        await seed.stats("space-1", "alice", 10)
        await seed.task(recurrence=DailyRule(), due_at=PAST, difficulty=3)

        await lifecycle.process_expired_recurring_tasks(now=NOW)

        stats = await store_group.stats_store.get_stats("space-1", "alice")
        assert stats.total_xp == 0
        assert stats.level == 1

    async def test_penalty_can_lower_level(self, store_group, seed, lifecycle):
        await seed.space(members=("alice",))
        await seed.stats("space-1", "alice", 110, level=2)
        await seed.task(recurrence=DailyRule(), due_at=PAST, difficulty=5)

        await lifecycle.process_expired_recurring_tasks(now=NOW)

        stats = await store_group.stats_store.get_stats("space-1", "alice")
        assert stats.total_xp == 85
        assert stats.level == 1

    async def test_penalty_goes_to_creator_not_assignee(self, store_group, seed, lifecycle):
        await seed.space(members=("alice", "bob"))
        await seed.stats("space-1", "alice", 100)
        await seed.stats("space-1", "bob", 100)
        await seed.task(
            recurrence=DailyRule(), due_at=PAST, difficulty=2, assignee_user_id="bob"
        )

        await lifecycle.process_expired_recurring_tasks(now=NOW)

        assert (await store_group.stats_store.get_stats("space-1", "alice")).total_xp == 90
        assert (await store_group.stats_store.get_stats("space-1", "bob")).total_xp == 100

    async def test_no_stats_no_penalty(self, store_group, seed, lifecycle):
        await seed.space(members=("alice",))
        task = await seed.task(recurrence=DailyRule(), due_at=PAST)

        result = await lifecycle.process_expired_recurring_tasks(now=NOW)

        assert result.expired == 0
        assert result.rescheduled == 1
        assert await store_group.stats_store.get_stats("space-1", "alice") is None
        loaded = await store_group.task_store.get_task(task.task_id)
        assert loaded.due_at > NOW

    async def test_penalty_writes_no_completion(self, store_group, seed, lifecycle):
        await seed.space(members=("alice",))
        await seed.stats("space-1", "alice", 30)
        task = await seed.task(recurrence=DailyRule(), due_at=PAST)

        await lifecycle.process_expired_recurring_tasks(now=NOW)

        assert await store_group.completion_store.list_for_task(task.task_id) == []


class TestExpirationReschedule:
    async def test_rescheduled_and_reminder_reset(self, store_group, seed, lifecycle):
        await seed.space(members=("alice",))
        task = await seed.task(
            recurrence=WeeklyRule(days_of_week=frozenset({1})),
            due_at=PAST,
            reminder_sent=True,
        )

        await lifecycle.process_expired_recurring_tasks(now=NOW)

        loaded = await store_group.task_store.get_task(task.task_id)
        # 2024-03-05 是周二，下一个周一为 03-11，移到当天结束
        assert loaded.due_at == datetime(2024, 3, 11, 23, 59, 59, 999000, tzinfo=UTC)
        assert loaded.reminder_sent is False

    async def test_second_sweep_does_not_penalize_again(self, store_group, seed, lifecycle):
        await seed.space(members=("alice",))
        await seed.stats("space-1", "alice", 100)
        await seed.task(recurrence=DailyRule(), due_at=PAST, difficulty=2)

        first = await lifecycle.process_expired_recurring_tasks(now=NOW)
        second = await lifecycle.process_expired_recurring_tasks(now=NOW + timedelta(hours=1))

        assert first.expired == 1
        assert second.expired == 0
        assert (await store_group.stats_store.get_stats("space-1", "alice")).total_xp == 90

    async def test_one_shot_and_paused_ignored(self, store_group, seed, lifecycle):
        await seed.space(members=("alice",))
        await seed.stats("space-1", "alice", 100)
        one_shot = await seed.task(due_at=PAST)
        await seed.task(recurrence=DailyRule(), due_at=PAST, is_paused=True)

        result = await lifecycle.process_expired_recurring_tasks(now=NOW)

        assert result.expired == 0
        assert result.rescheduled == 0
        assert await store_group.task_store.get_task(one_shot.task_id) is not None
        assert (await store_group.stats_store.get_stats("space-1", "alice")).total_xp == 100


class TestExpirationFailureIsolation:
    async def test_bad_timezone_skipped_without_penalty(self, store_group, seed, lifecycle):
        await seed.space("good", members=("alice",))
        await seed.space("broken", members=("alice",))
        await seed.stats("good", "alice", 100)
        await seed.stats("broken", "alice", 100)
        # 绕过创建时校验写入非法时区
        await store_group.conn.execute(
            "UPDATE spaces SET timezone = 'Not/AZone' WHERE space_id = 'broken'"
        )
        await store_group.conn.commit()
        broken_task = await seed.task(space_id="broken", recurrence=DailyRule(), due_at=PAST)
        await seed.task(space_id="good", recurrence=DailyRule(), due_at=PAST)

        result = await lifecycle.process_expired_recurring_tasks(now=NOW)

        assert result.expired == 1
        assert result.rescheduled == 1
        assert (await store_group.stats_store.get_stats("broken", "alice")).total_xp == 100
        assert (await store_group.stats_store.get_stats("good", "alice")).total_xp == 85
        # 失败的任务保持原样，等待配置修复后再处理
        assert (await store_group.task_store.get_task(broken_task.task_id)).due_at == PAST

    async def test_malformed_stored_rule_does_not_block_sweep(
        self, store_group, seed, lifecycle
    ):
        await seed.space(members=("alice",))
        await seed.stats("space-1", "alice", 100)
        broken = await seed.task(recurrence=DailyRule(), due_at=PAST - timedelta(hours=1))
        good = await seed.task(recurrence=DailyRule(), due_at=PAST, difficulty=3)
        await store_group.conn.execute(
            "UPDATE tasks SET recurrence = ? WHERE task_id = ?",
            ('{"type":"weekly","days_of_week":[9]}', broken.task_id),
        )
        await store_group.conn.commit()

        result = await lifecycle.process_expired_recurring_tasks(now=NOW)

        assert result.expired == 1
        assert result.rescheduled == 1
        assert (await store_group.stats_store.get_stats("space-1", "alice")).total_xp == 85
        assert (await store_group.task_store.get_task(good.task_id)).due_at > NOW
