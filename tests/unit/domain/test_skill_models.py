"""
Unit Tests for Skill and Player Value Objects
=============================================

Purpose
-------
Test construction guards and derived values of the immutable domain
snapshots without any store.

Testing Strategy
----------------
- Unit tests (fast, no database)
- AAA pattern (Arrange, Act, Assert)
- Test one behavior per test
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from src.database.models.enums import EquipmentSlot, SkillType
from src.domain.models import (
    AccrualModel,
    DomainValidationError,
    EquipmentBonus,
    EquipmentItem,
    InventoryStack,
    PlayerProfile,
    ProgressionResult,
    ReconciliationResult,
    SkillGain,
    SkillReconciliationError,
    SkillState,
    SkillView,
    ensure_utc,
)

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


# ============================================================================
# SKILL STATE
# ============================================================================


class TestSkillState:
    def test_defaults(self):
        state = SkillState(player_id="p1", skill_type=SkillType.MINING)

        assert state.level == 1
        assert state.experience == 0
        assert not state.is_active
        assert state.last_action_time is None

    def test_level_must_be_positive(self):
        with pytest.raises(DomainValidationError) as exc_info:
            SkillState(player_id="p1", skill_type=SkillType.MINING, level=0)

        assert exc_info.value.field == "level"

    def test_experience_cannot_be_negative(self):
        with pytest.raises(DomainValidationError):
            SkillState(player_id="p1", skill_type=SkillType.MINING, experience=-1)

    def test_immutable(self):
        state = SkillState(player_id="p1", skill_type=SkillType.MINING)

        with pytest.raises(FrozenInstanceError):
            state.level = 5  # type: ignore[misc]


# ============================================================================
# RESULTS
# ============================================================================


class TestProgressionResult:
    def test_level_ups_and_zero(self):
        result = ProgressionResult(
            units=3, exp_gained=0, items_gained=0, old_level=4, new_experience=300, new_level=4
        )

        assert result.level_ups == 0
        assert result.is_zero

    def test_negative_gain_rejected(self):
        with pytest.raises(DomainValidationError):
            ProgressionResult(
                units=1, exp_gained=-5, items_gained=0, old_level=1, new_experience=0, new_level=1
            )


class TestReconciliationResult:
    def _gain(self, skill, exp, items, level_ups):
        return SkillGain(
            skill_type=skill,
            exp_gained=exp,
            items_gained=items,
            level_ups=level_ups,
            old_level=1,
            new_level=1 + level_ups,
        )

    def test_totals(self):
        result = ReconciliationResult(
            player_id="p1",
            reconciled_at=NOW,
            model=AccrualModel.ACTION,
            gains=(
                self._gain(SkillType.MINING, 100, 4, 2),
                self._gain(SkillType.FISHING, 50, 1, 1),
            ),
        )

        assert result.total_exp_gained == 150
        assert result.total_items_gained == 5
        assert result.total_level_ups == 3
        assert not result.is_partial

    def test_to_dict(self):
        result = ReconciliationResult(
            player_id="p1",
            reconciled_at=NOW,
            model=AccrualModel.PER_SECOND,
            errors=(SkillReconciliationError(SkillType.COOKING, "SKILL_NOT_FOUND", "missing"),),
        )

        payload = result.to_dict()

        assert payload["model"] == "per_second"
        assert payload["reconciled_at"] == NOW.isoformat()
        assert payload["errors"] == [
            {"skill": "cooking", "error_code": "SKILL_NOT_FOUND", "reason": "missing"}
        ]
        assert "offline_minutes" not in payload
        assert result.is_partial


class TestSkillView:
    def test_percent_out_of_range(self):
        with pytest.raises(DomainValidationError):
            SkillView(
                skill_type=SkillType.MINING,
                level=1,
                experience=0,
                experience_to_next=25,
                progress_percent=120,
                is_active=False,
                current_resource=None,
            )


# ============================================================================
# EQUIPMENT AND PLAYER
# ============================================================================


class TestEquipment:
    def test_bonus_multipliers(self):
        bonus = EquipmentBonus(efficiency_pct=20, experience_pct=8)

        assert bonus.efficiency_multiplier == pytest.approx(1.2)
        assert bonus.experience_multiplier == pytest.approx(1.08)

    def test_negative_bonus_rejected(self):
        with pytest.raises(DomainValidationError):
            EquipmentBonus(efficiency_pct=-1)

    def test_empty_slot(self):
        item = EquipmentItem(player_id="p1", slot=EquipmentSlot.BOOTS)

        assert item.is_empty
        assert item.to_dict() == {
            "slot": "boots",
            "item_type": None,
            "efficiency_bonus": 0,
            "experience_bonus": 0,
        }


class TestPlayer:
    def test_blank_name_rejected(self):
        with pytest.raises(DomainValidationError):
            PlayerProfile(player_id="p1", name="  ", last_seen=NOW, created_at=NOW)

    def test_inventory_quantity_non_negative(self):
        with pytest.raises(DomainValidationError):
            InventoryStack(player_id="p1", item_type="trout", quantity=-1)

    def test_ensure_utc(self):
        naive = datetime(2025, 1, 1, 12, 0)

        assert ensure_utc(naive) == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert ensure_utc(NOW) is NOW
        assert ensure_utc(None) is None
