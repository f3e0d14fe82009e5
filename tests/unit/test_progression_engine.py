"""
Unit Tests for ProgressionEngine
================================

Test Coverage
-------------
- Per-second, per-minute and per-action accrual
- Equipment efficiency and experience bonuses
- Zero results (inactive, never started, sub-unit elapsed time)
- Invalid input and the level monotonicity guard
- Construction from balance configuration

Testing Strategy
----------------
- Pure computation, no store
- Hand-computed expectations
"""

from datetime import datetime, timezone

import pytest

from src.database.models.enums import EquipmentSlot, SkillType
from src.domain.models.player import EquipmentItem
from src.domain.models.skill import NO_BONUS, AccrualModel, EquipmentBonus, SkillState
from src.modules.shared.exceptions import (
    InvalidElapsedTimeError,
    ProgressionInvariantError,
)
from src.modules.skills.bonuses import aggregate_bonuses
from src.modules.skills.engine import ProgressionEngine

STARTED = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _active(skill, level=1, experience=0, resource=None):
    return SkillState(
        player_id="p1",
        skill_type=skill,
        level=level,
        experience=experience,
        is_active=True,
        last_action_time=STARTED,
        current_resource=resource,
    )


# ============================================================================
# PER-SECOND (LIVE) MODEL
# ============================================================================


class TestPerSecondModel:
    def test_five_seconds_of_mining(self, engine):
        state = _active(SkillType.MINING, resource="copper_ore")

        result = engine.compute(state, 5000, AccrualModel.PER_SECOND)

        # 30 exp/min -> 0.5 exp/s; 0.8 items/min -> 0.0133 items/s
        assert result.units == 5
        assert result.exp_gained == 2
        assert result.items_gained == 0
        assert result.new_experience == 2
        assert result.new_level == 1
        assert result.level_ups == 0

    def test_partial_seconds_are_dropped(self, engine):
        state = _active(SkillType.MINING)

        result = engine.compute(state, 5999, AccrualModel.PER_SECOND)

        assert result.units == 5

    def test_one_minute_of_items(self, engine):
        state = _active(SkillType.WOODCUTTING)

        result = engine.compute(state, 60_000, AccrualModel.PER_SECOND)

        assert result.exp_gained == 26
        assert result.items_gained == 0

    def test_efficiency_scales_items(self, engine):
        state = _active(SkillType.COOKING)
        bonus = EquipmentBonus(efficiency_pct=25)

        result = engine.compute(state, 600_000, AccrualModel.PER_SECOND, bonus)

        # 0.8 * 1.25 = 1 item/min for 10 minutes
        assert result.items_gained == 10
        assert result.exp_gained == 200


# ============================================================================
# PER-MINUTE (OFFLINE RATE) MODEL
# ============================================================================


class TestPerMinuteModel:
    def test_sixty_minutes_of_mining(self, engine):
        state = _active(SkillType.MINING)

        result = engine.compute(state, 3_600_000, AccrualModel.PER_MINUTE)

        # 60 * 2.3 is 137.99999999999997 in binary floating point
        assert result.units == 60
        assert result.exp_gained == 138
        assert result.items_gained == 48
        assert result.new_level == 3

    def test_under_one_minute_is_zero(self, engine):
        state = _active(SkillType.FISHING)

        result = engine.compute(state, 59_999, AccrualModel.PER_MINUTE)

        assert result.is_zero
        assert result.units == 0

    def test_experience_bonus(self, engine):
        state = _active(SkillType.WOODCUTTING)
        bonus = EquipmentBonus(experience_pct=50)

        result = engine.compute(state, 600_000, AccrualModel.PER_MINUTE, bonus)

        assert result.exp_gained == 30


# ============================================================================
# PER-ACTION MODEL
# ============================================================================


class TestActionModel:
    def test_two_hours_of_fishing_with_efficiency(self, engine):
        state = _active(SkillType.FISHING, level=5, experience=523, resource="trout")
        bonus = EquipmentBonus(efficiency_pct=20)

        result = engine.compute(state, 7_200_000, AccrualModel.ACTION, bonus)

        assert result.units == 2468
        assert result.exp_gained == 37020
        assert result.new_experience == 37543
        assert result.new_level == 39
        assert result.level_ups == 34
        # success rate at level 5 is 0.875
        assert result.items_gained == 2159

    def test_irrelevant_equipment_is_ignored(self, engine):
        state = _active(SkillType.MINING)
        rod = EquipmentItem("p1", EquipmentSlot.TOOL, "fishing_rod", 10, 8)
        bonus = aggregate_bonuses([rod], SkillType.MINING)

        with_rod = engine.compute(state, 40_000, AccrualModel.ACTION, bonus)
        bare = engine.compute(state, 40_000, AccrualModel.ACTION, NO_BONUS)

        assert with_rod == bare
        assert with_rod.units == 10
        assert with_rod.exp_gained == 230

    def test_less_than_one_action_is_zero(self, engine):
        state = _active(SkillType.MINING)

        result = engine.compute(state, 3999, AccrualModel.ACTION)

        assert result.is_zero

    def test_success_rate_is_capped(self, engine):
        assert engine.success_rate(1) == pytest.approx(0.855)
        assert engine.success_rate(30) == pytest.approx(1.0)
        assert engine.success_rate(99) == 1.0


# ============================================================================
# ZERO RESULTS AND GUARDS
# ============================================================================


class TestZeroAndGuards:
    def test_inactive_skill_gains_nothing(self, engine):
        state = SkillState(
            player_id="p1",
            skill_type=SkillType.MINING,
            last_action_time=STARTED,
        )

        result = engine.compute(state, 3_600_000, AccrualModel.PER_SECOND)

        assert result.is_zero
        assert result.new_level == state.level
        assert result.new_experience == state.experience

    def test_never_started_skill_gains_nothing(self, engine):
        state = SkillState(player_id="p1", skill_type=SkillType.MINING, is_active=True)

        result = engine.compute(state, 3_600_000, AccrualModel.ACTION)

        assert result.is_zero

    def test_zero_elapsed(self, engine):
        result = engine.compute(_active(SkillType.COOKING), 0, AccrualModel.PER_SECOND)
        assert result.is_zero

    def test_negative_elapsed_is_rejected(self, engine):
        with pytest.raises(InvalidElapsedTimeError) as exc_info:
            engine.compute(_active(SkillType.MINING), -1, AccrualModel.PER_SECOND)

        assert exc_info.value.error_code == "INVALID_ELAPSED_TIME"

    def test_level_drop_is_rejected(self, engine):
        """Stored level above what the experience supports must not be lowered."""
        state = _active(SkillType.MINING, level=10, experience=0)

        with pytest.raises(ProgressionInvariantError) as exc_info:
            engine.compute(state, 60_000, AccrualModel.PER_SECOND)

        assert exc_info.value.old_level == 10
        assert exc_info.value.new_level == 1

    def test_deterministic(self, engine):
        state = _active(SkillType.FISHING, level=5, experience=523)
        bonus = EquipmentBonus(efficiency_pct=20, experience_pct=8)

        first = engine.compute(state, 1_234_567, AccrualModel.ACTION, bonus)
        second = engine.compute(state, 1_234_567, AccrualModel.ACTION, bonus)

        assert first == second


# ============================================================================
# CONFIGURATION
# ============================================================================


class TestEngineConfiguration:
    def test_from_config_reads_yaml_rates(self, config_manager):
        engine = ProgressionEngine.from_config(config_manager)

        assert engine.live_rate(SkillType.MINING) == 30
        assert engine.offline_rate(SkillType.FISHING) == pytest.approx(1.8)

    def test_from_config_honours_overrides(self, config_manager):
        config_manager.set("skills.live_rates.mining", 60)
        config_manager.set("skills.item_rate.base_per_minute", 6)

        engine = ProgressionEngine.from_config(config_manager)
        result = engine.compute(_active(SkillType.MINING), 10_000, AccrualModel.PER_SECOND)

        assert result.exp_gained == 10
        assert result.items_gained == 1

    def test_constructor_overrides_single_skill(self):
        engine = ProgressionEngine(live_rates={SkillType.COOKING: 120})

        assert engine.live_rate(SkillType.COOKING) == 120
        assert engine.live_rate(SkillType.MINING) == 30
