"""
Domain models package.

Design Notes
------------
Domain models are separate from database models:
- Database models (src/database/models/): SQLAlchemy schemas
- Domain models (src/domain/models/): immutable value objects

Stores convert ORM rows into these snapshots via ``from_db``; services
operate on snapshots and write back patch dicts.
"""

from .base import (
    DomainEvent,
    DomainValidationError,
    ensure_utc,
    validate_non_negative,
    validate_not_empty,
    validate_positive,
)
from .player import EquipmentItem, InventoryStack, PlayerProfile
from .skill import (
    NO_BONUS,
    AccrualModel,
    EquipmentBonus,
    ProgressionResult,
    ReconciliationResult,
    SkillGain,
    SkillReconciliationError,
    SkillState,
    SkillView,
)

__all__ = [
    "DomainEvent",
    "DomainValidationError",
    "ensure_utc",
    "validate_positive",
    "validate_non_negative",
    "validate_not_empty",
    "PlayerProfile",
    "InventoryStack",
    "EquipmentItem",
    "AccrualModel",
    "SkillState",
    "EquipmentBonus",
    "NO_BONUS",
    "ProgressionResult",
    "SkillGain",
    "SkillReconciliationError",
    "ReconciliationResult",
    "SkillView",
]
