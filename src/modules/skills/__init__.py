"""
Skills Module
=============

Skill progression: rate table, equipment bonus aggregation, the pure
progression engine and the reconciliation service that applies it to
persisted state.
"""

from .bonuses import RELEVANT_EQUIPMENT, aggregate_bonuses, is_relevant
from .engine import AccrualRate, ProgressionEngine
from .locks import PlayerLockRegistry
from .rates import (
    SKILL_RATES,
    ResourceTier,
    SkillRate,
    available_resources,
    best_resource,
    get_skill_rate,
    resource_tier,
)
from .service import SkillReconciliationService

__all__ = [
    "SKILL_RATES",
    "SkillRate",
    "ResourceTier",
    "get_skill_rate",
    "available_resources",
    "best_resource",
    "resource_tier",
    "RELEVANT_EQUIPMENT",
    "aggregate_bonuses",
    "is_relevant",
    "AccrualRate",
    "ProgressionEngine",
    "PlayerLockRegistry",
    "SkillReconciliationService",
]
