"""消息文案测试"""

import random

from levelup.notify import messages


class TestTaskReminder:
    def test_upcoming_variant(self):
        text = messages.task_reminder("Laundry", overdue=False, rng=random.Random(1))
        assert "<b>Laundry</b>" in text
        assert "overdue" not in text

    def test_overdue_variant(self):
        for seed in range(5):
            text = messages.task_reminder("Laundry", overdue=True, rng=random.Random(seed))
            assert "overdue" in text

    def test_recurring_suffix_and_name(self):
        text = messages.task_reminder(
            "Laundry",
            overdue=False,
            recurring=True,
            recipient_name="Ann",
            rng=random.Random(0),
        )
        assert text.startswith("Ann! ")
        assert text.endswith(" (repeats)")

    def test_user_input_escaped(self):
        text = messages.task_reminder(
            "<script>", overdue=True, recipient_name="<i>", rng=random.Random(0)
        )
        assert "<script>" not in text
        assert "&lt;script&gt;" in text
        assert text.startswith("&lt;i&gt;! ")

    def test_day_before_variant(self):
        for seed in range(5):
            text = messages.task_reminder(
                "Laundry", overdue=False, day_before=True, rng=random.Random(seed)
            )
            assert "tomorrow" in text.lower()
            assert "<b>Laundry</b>" in text

    def test_overdue_wins_over_day_before(self):
        text = messages.task_reminder(
            "Laundry", overdue=True, day_before=True, rng=random.Random(0)
        )
        assert "overdue" in text


class TestOtherMessages:
    def test_task_completed(self):
        assert messages.task_completed("A & B", 30) == "Task <b>A &amp; B</b> completed! +30 XP"

    def test_level_up_with_reward(self):
        text = messages.level_up(5, "Movie night")
        assert "level 5" in text
        assert "<b>Movie night</b>" in text

    def test_level_up_without_reward(self):
        assert "Reward" not in messages.level_up(2)

    def test_engagement_tiers(self):
        for tier in ("nudge", "beg", "reengage"):
            assert messages.engagement(tier)

    def test_streak_reward(self):
        assert "+5 XP" in messages.streak_reward(5)

    def test_poke(self):
        assert messages.poke("A<b>") == (
            "You were poked by <b>A&lt;b&gt;</b>! Don't forget your tasks!"
        )

    def test_assignee_messages(self):
        added = messages.assignee_added("Dishes", "Home", "Ann")
        removed = messages.assignee_removed("Dishes", "Home", "Ann")
        assert added.startswith("You were assigned to task <b>Dishes</b>")
        assert removed.startswith("You were unassigned from task <b>Dishes</b>")
        assert "Initiator: <b>Ann</b>" in removed
