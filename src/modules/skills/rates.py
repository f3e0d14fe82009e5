"""
Skill rate table.

Static per-skill action rates and the resource unlock ladder. Per-minute
experience rates default to the values here but are read from
``config/skills.yaml`` by the progression engine so they can be tuned.

Usage
-----
    from src.modules.skills.rates import best_resource

    best_resource(SkillType.FISHING, 30).resource_id  # "salmon"
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from src.database.models.enums import SkillType


@dataclass(frozen=True)
class ResourceTier:
    """One rung of a skill's resource ladder."""

    resource_id: str
    min_level: int
    resource_exp: int


@dataclass(frozen=True)
class SkillRate:
    """
    Static rates for one skill.

    Attributes
    ----------
    base_experience_per_action : int
        Experience per completed action (action model)
    base_time_per_action_ms : int
        Duration of one action before efficiency bonuses
    resource_ladder : Tuple[ResourceTier, ...]
        Resources in unlock order
    offline_exp_per_minute : float
        Minute-model experience rate
    live_exp_per_minute : float
        Live tick experience rate
    """

    skill_type: SkillType
    base_experience_per_action: int
    base_time_per_action_ms: int
    resource_ladder: Tuple[ResourceTier, ...]
    offline_exp_per_minute: float
    live_exp_per_minute: float


SKILL_RATES: Mapping[SkillType, SkillRate] = MappingProxyType(
    {
        SkillType.MINING: SkillRate(
            skill_type=SkillType.MINING,
            base_experience_per_action=23,
            base_time_per_action_ms=4000,
            resource_ladder=(
                ResourceTier("copper_ore", 1, 15),
                ResourceTier("iron_ore", 15, 23),
                ResourceTier("coal", 30, 35),
                ResourceTier("gold_ore", 40, 52),
            ),
            offline_exp_per_minute=2.3,
            live_exp_per_minute=30,
        ),
        SkillType.FISHING: SkillRate(
            skill_type=SkillType.FISHING,
            base_experience_per_action=15,
            base_time_per_action_ms=3500,
            resource_ladder=(
                ResourceTier("shrimp", 1, 10),
                ResourceTier("trout", 5, 15),
                ResourceTier("salmon", 25, 28),
                ResourceTier("lobster", 40, 45),
            ),
            offline_exp_per_minute=1.8,
            live_exp_per_minute=24,
        ),
        SkillType.WOODCUTTING: SkillRate(
            skill_type=SkillType.WOODCUTTING,
            base_experience_per_action=19,
            base_time_per_action_ms=3800,
            resource_ladder=(
                ResourceTier("logs", 1, 12),
                ResourceTier("oak_logs", 10, 19),
                ResourceTier("willow_logs", 20, 30),
                ResourceTier("maple_logs", 35, 48),
            ),
            offline_exp_per_minute=2.0,
            live_exp_per_minute=26,
        ),
        SkillType.COOKING: SkillRate(
            skill_type=SkillType.COOKING,
            base_experience_per_action=12,
            base_time_per_action_ms=2500,
            resource_ladder=(
                ResourceTier("bread", 1, 8),
                ResourceTier("fish", 5, 12),
                ResourceTier("stew", 15, 20),
                ResourceTier("cake", 30, 35),
            ),
            offline_exp_per_minute=1.5,
            live_exp_per_minute=20,
        ),
    }
)


def get_skill_rate(skill_type: SkillType) -> SkillRate:
    return SKILL_RATES[SkillType(skill_type)]


def available_resources(skill_type: SkillType, level: int) -> List[ResourceTier]:
    """Ladder entries unlocked at ``level``, in ladder order."""
    return [
        tier
        for tier in get_skill_rate(skill_type).resource_ladder
        if tier.min_level <= level
    ]


def best_resource(skill_type: SkillType, level: int) -> ResourceTier:
    """
    Highest unlocked ladder entry.

    Every ladder starts at level 1, so a valid level always unlocks at least
    the first rung.
    """
    unlocked = available_resources(skill_type, level)
    if not unlocked:
        return get_skill_rate(skill_type).resource_ladder[0]
    return unlocked[-1]


def resource_tier(skill_type: SkillType, resource: str) -> Optional[ResourceTier]:
    """Ladder entry for ``resource``, or None if the skill does not gather it."""
    for tier in get_skill_rate(skill_type).resource_ladder:
        if tier.resource_id == resource:
            return tier
    return None
