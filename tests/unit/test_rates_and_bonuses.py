"""
Unit tests for the skill rate table and equipment bonus aggregation.
"""

import pytest

from src.database.models.enums import EquipmentSlot, SkillType
from src.domain.models.player import EquipmentItem
from src.modules.skills.bonuses import RELEVANT_EQUIPMENT, aggregate_bonuses, is_relevant
from src.modules.skills.rates import (
    SKILL_RATES,
    available_resources,
    best_resource,
    get_skill_rate,
    resource_tier,
)


def _item(slot, item_type=None, efficiency=0, experience=0):
    return EquipmentItem(
        player_id="p1",
        slot=slot,
        item_type=item_type,
        efficiency_bonus=efficiency,
        experience_bonus=experience,
    )


# ============================================================================
# RATE TABLE
# ============================================================================


class TestSkillRates:
    def test_every_skill_has_rates(self):
        assert set(SKILL_RATES) == set(SkillType)

    @pytest.mark.parametrize(
        "skill,exp,ms,offline,live",
        [
            (SkillType.MINING, 23, 4000, 2.3, 30),
            (SkillType.FISHING, 15, 3500, 1.8, 24),
            (SkillType.WOODCUTTING, 19, 3800, 2.0, 26),
            (SkillType.COOKING, 12, 2500, 1.5, 20),
        ],
    )
    def test_table_values(self, skill, exp, ms, offline, live):
        rate = get_skill_rate(skill)
        assert rate.base_experience_per_action == exp
        assert rate.base_time_per_action_ms == ms
        assert rate.offline_exp_per_minute == offline
        assert rate.live_exp_per_minute == live

    def test_ladders_start_at_level_one(self):
        for rate in SKILL_RATES.values():
            assert rate.resource_ladder[0].min_level == 1

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            SKILL_RATES[SkillType.MINING] = None  # type: ignore[index]

    def test_lookup_by_value(self):
        assert get_skill_rate("fishing").skill_type is SkillType.FISHING


class TestResourceLadder:
    def test_level_one_unlocks_first_rung(self):
        resources = available_resources(SkillType.MINING, 1)
        assert [tier.resource_id for tier in resources] == ["copper_ore"]

    def test_unlocked_in_ladder_order(self):
        resources = available_resources(SkillType.FISHING, 30)
        assert [tier.resource_id for tier in resources] == ["shrimp", "trout", "salmon"]

    @pytest.mark.parametrize(
        "skill,level,expected",
        [
            (SkillType.MINING, 14, "copper_ore"),
            (SkillType.MINING, 15, "iron_ore"),
            (SkillType.FISHING, 30, "salmon"),
            (SkillType.WOODCUTTING, 99, "maple_logs"),
            (SkillType.COOKING, 5, "fish"),
        ],
    )
    def test_best_resource(self, skill, level, expected):
        assert best_resource(skill, level).resource_id == expected

    def test_resource_tier_lookup(self):
        tier = resource_tier(SkillType.MINING, "coal")
        assert tier is not None
        assert tier.min_level == 30
        assert tier.resource_exp == 35

    def test_resource_of_another_skill(self):
        assert resource_tier(SkillType.MINING, "shrimp") is None


# ============================================================================
# EQUIPMENT BONUSES
# ============================================================================


class TestBonusAggregation:
    def test_relevance_table(self):
        assert is_relevant("fishing_rod", SkillType.FISHING)
        assert not is_relevant("fishing_rod", SkillType.MINING)
        assert "mining_helmet" in RELEVANT_EQUIPMENT[SkillType.MINING]

    def test_irrelevant_item_contributes_nothing(self):
        rod = _item(EquipmentSlot.TOOL, "fishing_rod", 10, 8)

        bonus = aggregate_bonuses([rod], SkillType.MINING)

        assert bonus.efficiency_pct == 0
        assert bonus.experience_pct == 0

    def test_relevant_items_are_summed(self):
        equipment = [
            _item(EquipmentSlot.TOOL, "iron_pickaxe", 15, 10),
            _item(EquipmentSlot.HELMET, "mining_helmet", 5, 5),
            _item(EquipmentSlot.GLOVES),
            _item(EquipmentSlot.BOOTS),
        ]

        bonus = aggregate_bonuses(equipment, SkillType.MINING)

        assert bonus.efficiency_pct == 20
        assert bonus.experience_pct == 15
        assert bonus.efficiency_multiplier == pytest.approx(1.2)
        assert bonus.experience_multiplier == pytest.approx(1.15)

    def test_empty_slots_only(self):
        bonus = aggregate_bonuses([_item(slot) for slot in EquipmentSlot], SkillType.COOKING)
        assert bonus.efficiency_multiplier == 1
        assert bonus.experience_multiplier == 1
