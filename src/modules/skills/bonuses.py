"""
Equipment bonus aggregation.

Sums the bonuses of equipped items that are relevant to a skill. Items that
do not help a skill (a fishing rod while mining) and empty slots contribute
nothing.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping

from src.database.models.enums import SkillType
from src.domain.models.player import EquipmentItem
from src.domain.models.skill import EquipmentBonus

RELEVANT_EQUIPMENT: Mapping[SkillType, FrozenSet[str]] = MappingProxyType(
    {
        SkillType.MINING: frozenset({"iron_pickaxe", "steel_pickaxe", "mining_helmet"}),
        SkillType.FISHING: frozenset({"fishing_rod", "fly_fishing_rod"}),
        SkillType.WOODCUTTING: frozenset({"iron_axe", "steel_axe"}),
        SkillType.COOKING: frozenset({"cooking_pot", "chef_hat"}),
    }
)


def is_relevant(item_type: str, skill_type: SkillType) -> bool:
    return item_type in RELEVANT_EQUIPMENT[SkillType(skill_type)]


def aggregate_bonuses(
    equipment: Iterable[EquipmentItem], skill_type: SkillType
) -> EquipmentBonus:
    """
    Sum efficiency and experience bonuses over items relevant to ``skill_type``.

    Example:
        >>> rod = EquipmentItem("p1", EquipmentSlot.TOOL, "fishing_rod", 10, 8)
        >>> aggregate_bonuses([rod], SkillType.MINING)
        EquipmentBonus(efficiency_pct=0.0, experience_pct=0.0)
    """
    efficiency = 0.0
    experience = 0.0
    for item in equipment:
        if item.is_empty or not is_relevant(item.item_type, skill_type):
            continue
        efficiency += item.efficiency_bonus
        experience += item.experience_bonus

    return EquipmentBonus(efficiency_pct=efficiency, experience_pct=experience)
