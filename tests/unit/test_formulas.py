"""
Unit tests for the leveling curve.

Covers experience thresholds, level derivation around the level 2 boundary,
experience to next level and the progress percentage used by skill views.
"""

import pytest

from src.modules.shared.formulas import (
    experience_for_level,
    experience_to_next,
    level_for_experience,
    level_progress_percent,
)


class TestExperienceForLevel:
    @pytest.mark.parametrize("level", [-3, 0, 1])
    def test_levels_at_or_below_one_start_at_zero(self, level):
        assert experience_for_level(level) == 0

    @pytest.mark.parametrize(
        "level,expected",
        [(2, 25), (3, 100), (10, 2025), (39, 36100), (40, 38025)],
    )
    def test_quadratic_curve(self, level, expected):
        assert experience_for_level(level) == expected

    def test_thresholds_strictly_increase(self):
        for level in range(1, 500):
            assert experience_for_level(level + 1) > experience_for_level(level), level


class TestLevelForExperience:
    @pytest.mark.parametrize("experience", [0, 1, 24, 25, 49])
    def test_below_fifty_is_level_one(self, experience):
        """25..49 is above the level 2 curve point but still level 1."""
        assert level_for_experience(experience) == 1

    @pytest.mark.parametrize(
        "experience,expected",
        [(50, 2), (99, 2), (100, 3), (224, 3), (225, 4), (523, 5), (37543, 39)],
    )
    def test_floor_of_square_root(self, experience, expected):
        assert level_for_experience(experience) == expected

    def test_exact_at_perfect_squares(self):
        for level in range(3, 200):
            threshold = experience_for_level(level)
            assert level_for_experience(threshold) == level
            assert level_for_experience(threshold - 1) == level - 1

    def test_monotonic(self):
        levels = [level_for_experience(exp) for exp in range(0, 20000, 7)]
        assert levels == sorted(levels)


class TestExperienceToNext:
    def test_fresh_skill(self):
        assert experience_to_next(0) == 25

    def test_mid_level(self):
        # Level 5 ends at 625.
        assert experience_to_next(523) == 102

    def test_at_threshold(self):
        assert experience_to_next(100) == 125


class TestLevelProgressPercent:
    def test_start_of_level(self):
        assert level_progress_percent(100, 3) == 0.0

    def test_partial_progress_rounded(self):
        # Level 5 spans 400..625.
        assert level_progress_percent(523, 5) == pytest.approx(54.67)

    def test_clamped_below_threshold(self):
        assert level_progress_percent(0, 2) == 0.0

    def test_clamped_above_next_threshold(self):
        assert level_progress_percent(40, 1) == 100.0
