"""TaskLifecycleService.complete_task 测试

测试内容：
1. 一次性任务：发放 XP 后删除，重复完成被拒绝
2. 周期任务：保留并重新排期，清除 reminder_sent
3. 整空间任务：每个成员各得一次 XP，只返回请求者的结果
4. 升级通知（含奖励文本）
5. 通知失败不影响完成
"""

import asyncio
from datetime import UTC, datetime, time, timedelta
from unittest.mock import AsyncMock

import pytest
from levelup.core.exceptions import InvalidStateError, NotFoundError
from levelup.core.models import AssigneeScope, DailyRule, Reward
from levelup.engine.lifecycle import TaskLifecycleService
from levelup.engine.notifier import Notifier

NOW = datetime(2024, 3, 5, 12, 0, tzinfo=UTC)


class TestCompleteOneShot:
    async def test_awards_and_deletes(self, store_group, seed, lifecycle, transport):
        await seed.space(members=("alice",))
        task = await seed.task(difficulty=3)

        outcome = await lifecycle.complete_task(task.task_id, "alice", now=NOW)

        assert outcome.xp_awarded == 30
        assert outcome.level_up is False
        assert outcome.new_level == 1
        assert outcome.recipients == 1
        assert outcome.rescheduled is False
        assert await store_group.task_store.get_task(task.task_id) is None

        stats = await store_group.stats_store.get_stats("space-1", "alice")
        assert stats.total_xp == 30
        records = await store_group.completion_store.list_for_task(task.task_id)
        assert len(records) == 1
        assert records[0].xp == 30
        assert records[0].completed_at == NOW
        assert any("completed" in text for text in transport.messages_for("chat-alice"))

    async def test_second_completion_rejected(self, seed, lifecycle):
        await seed.space(members=("alice",))
        task = await seed.task()

        await lifecycle.complete_task(task.task_id, "alice", now=NOW)
        with pytest.raises(NotFoundError):
            await lifecycle.complete_task(task.task_id, "alice", now=NOW)

    async def test_concurrent_completion_awards_once(self, store_group, seed, lifecycle):
        await seed.space(members=("alice",))
        task = await seed.task()

        results = await asyncio.gather(
            lifecycle.complete_task(task.task_id, "alice", now=NOW),
            lifecycle.complete_task(task.task_id, "alice", now=NOW),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], (InvalidStateError, NotFoundError))
        assert len(await store_group.completion_store.list_for_task(task.task_id)) == 1
        stats = await store_group.stats_store.get_stats("space-1", "alice")
        assert stats.total_xp == 30

    async def test_missing_task(self, lifecycle):
        with pytest.raises(NotFoundError) as exc_info:
            await lifecycle.complete_task("missing", "alice", now=NOW)
        assert exc_info.value.entity == "task"


class TestCompleteRecurring:
    async def test_rescheduled_not_deleted(self, store_group, seed, lifecycle):
        await seed.space(members=("alice",))
        task = await seed.task(recurrence=DailyRule(), due_at=NOW, reminder_sent=True)

        outcome = await lifecycle.complete_task(task.task_id, "alice", now=NOW)

        assert outcome.rescheduled is True
        loaded = await store_group.task_store.get_task(task.task_id)
        assert loaded is not None
        assert loaded.due_at == datetime(2024, 3, 6, 23, 59, 59, 999000, tzinfo=UTC)
        assert loaded.reminder_sent is False

    async def test_time_of_day_in_space_timezone(self, store_group, seed, lifecycle):
        await seed.space(timezone="Europe/Berlin", members=("alice",))
        task = await seed.task(recurrence=DailyRule(time_of_day=time(8, 0)), due_at=NOW)

        await lifecycle.complete_task(task.task_id, "alice", now=NOW)

        loaded = await store_group.task_store.get_task(task.task_id)
        # 柏林冬令时 UTC+1
        assert loaded.due_at == datetime(2024, 3, 6, 7, 0, tzinfo=UTC)

    async def test_can_complete_every_cycle(self, store_group, seed, lifecycle):
        await seed.space(members=("alice",))
        task = await seed.task(recurrence=DailyRule(), due_at=NOW)

        for day in range(3):
            await lifecycle.complete_task(task.task_id, "alice", now=NOW + timedelta(days=day))

        stats = await store_group.stats_store.get_stats("space-1", "alice")
        assert stats.total_xp == 90
        assert len(await store_group.completion_store.list_for_task(task.task_id)) == 3


class TestCompleteWholeSpace:
    async def test_every_member_awarded(self, store_group, seed, lifecycle, transport):
        await seed.space(members=("alice", "bob", "carol"))
        # bob 已接近升级
        await seed.stats("space-1", "bob", 90)
        task = await seed.task(assignee_scope=AssigneeScope.SPACE, difficulty=3)

        outcome = await lifecycle.complete_task(task.task_id, "alice", now=NOW)

        assert outcome.recipients == 3
        assert outcome.level_up is False
        assert outcome.new_level == 1
        assert outcome.xp_awarded == 30

        records = await store_group.completion_store.list_for_task(task.task_id)
        assert sorted(r.user_id for r in records) == ["alice", "bob", "carol"]

        bob = await store_group.stats_store.get_stats("space-1", "bob")
        assert bob.total_xp == 120
        assert bob.level == 2
        assert any("level 2" in text for text in transport.messages_for("chat-bob"))
        assert not any("level" in text for text in transport.messages_for("chat-alice"))

    async def test_empty_space_falls_back_to_requester(self, store_group, seed, lifecycle):
        await seed.user("alice")
        await seed.space()
        task = await seed.task(assignee_scope=AssigneeScope.SPACE)

        outcome = await lifecycle.complete_task(task.task_id, "alice", now=NOW)

        assert outcome.recipients == 1
        assert outcome.xp_awarded == 30


class TestCompletionOutcome:
    async def test_requester_not_recipient_gets_neutral_outcome(
        self, store_group, seed, lifecycle
    ):
        await seed.space(members=("alice", "bob"))
        await seed.stats("space-1", "alice", 250, level=3)
        task = await seed.task(assignee_user_id="bob")

        outcome = await lifecycle.complete_task(task.task_id, "alice", now=NOW)

        assert outcome.xp_awarded == 0
        assert outcome.level_up is False
        assert outcome.new_level == 3
        assert (await store_group.stats_store.get_stats("space-1", "bob")).total_xp == 30

    async def test_level_up_with_reward(self, store_group, seed, lifecycle, transport):
        await seed.space(members=("alice",))
        await seed.stats("space-1", "alice", 80)
        await store_group.stats_store.set_reward(
            Reward(space_id="space-1", level=2, text="Pizza night")
        )
        await store_group.conn.commit()
        task = await seed.task(difficulty=3)

        outcome = await lifecycle.complete_task(task.task_id, "alice", now=NOW)

        assert outcome.level_up is True
        assert outcome.new_level == 2
        texts = transport.messages_for("chat-alice")
        assert any("Pizza night" in text for text in texts)


class TestNotificationFailure:
    async def test_transport_error_does_not_fail_completion(self, store_group, seed, ledger):
        broken = AsyncMock()
        broken.send_message.side_effect = RuntimeError("transport down")
        service = TaskLifecycleService(store_group, ledger, Notifier(store_group, broken))

        await seed.space(members=("alice",))
        task = await seed.task()

        outcome = await service.complete_task(task.task_id, "alice", now=NOW)

        assert outcome.xp_awarded == 30
        broken.send_message.assert_awaited()
        assert (await store_group.stats_store.get_stats("space-1", "alice")).total_xp == 30
