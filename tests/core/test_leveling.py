"""等级曲线测试"""

from levelup.core.leveling import (
    calculate_level,
    default_xp_for_next_level,
    level_progress,
    requirement_table,
    task_xp,
    total_xp_for_level,
    xp_for_next_level,
)
from levelup.core.models import LevelRequirement


class TestDefaultCurve:
    def test_requirement_grows_per_level(self):
        assert default_xp_for_next_level(1) == 102
        assert default_xp_for_next_level(2) == 104
        assert default_xp_for_next_level(10) == 120

    def test_max_level_requires_nothing(self):
        assert default_xp_for_next_level(80) == 0
        assert xp_for_next_level(80) == 0

    def test_total_xp_for_level(self):
        assert total_xp_for_level(1) == 0
        assert total_xp_for_level(2) == 102
        assert total_xp_for_level(3) == 206

    def test_task_xp_is_linear_in_difficulty(self):
        assert [task_xp(d) for d in range(1, 6)] == [10, 20, 30, 40, 50]


class TestCalculateLevel:
    def test_zero_xp_is_level_one(self):
        assert calculate_level(0) == 1

    def test_negative_xp_is_level_one(self):
        assert calculate_level(-50) == 1

    def test_thresholds(self):
        assert calculate_level(101) == 1
        assert calculate_level(102) == 2
        assert calculate_level(205) == 2
        assert calculate_level(206) == 3

    def test_monotonic(self):
        levels = [calculate_level(xp) for xp in range(0, 20000, 37)]
        assert levels == sorted(levels)

    def test_capped_at_max_level(self):
        assert calculate_level(10**9) == 80

    def test_space_table_overrides_default(self):
        table = requirement_table(
            [
                LevelRequirement(space_id="s", level=1, xp_required=10),
                LevelRequirement(space_id="s", level=2, xp_required=20),
            ]
        )
        assert table == {1: 10, 2: 20}
        assert calculate_level(9, table) == 1
        assert calculate_level(10, table) == 2
        assert calculate_level(30, table) == 3
        # 第 3 级起回退到默认公式（106）
        assert calculate_level(30 + 105, table) == 3
        assert calculate_level(30 + 106, table) == 4

    def test_consistent_with_total_xp_for_level(self):
        for level in (2, 5, 17, 40):
            assert calculate_level(total_xp_for_level(level)) == level
            assert calculate_level(total_xp_for_level(level) - 1) == level - 1


class TestLevelProgress:
    def test_progress_within_level(self):
        progress = level_progress(153)
        assert progress.level == 2
        assert progress.xp_into_level == 51
        assert progress.xp_required == 104
        assert progress.xp_to_next_level == 53
        assert progress.percent == 49

    def test_fresh_user(self):
        progress = level_progress(0)
        assert progress.level == 1
        assert progress.xp_into_level == 0
        assert progress.percent == 0

    def test_max_level_is_full(self):
        progress = level_progress(10**9)
        assert progress.level == 80
        assert progress.xp_required == 0
        assert progress.percent == 100
