"""
Database models.

Importing this package registers every table on ``Base.metadata``.
"""

from src.core.database.base import Base

from . import enums
from .enums import EquipmentSlot, SkillType
from .player import (
    PlayerCore,
    PlayerEquipment,
    PlayerInventoryItem,
    PlayerSkill,
)

__all__ = [
    "Base",
    "enums",
    "SkillType",
    "EquipmentSlot",
    "PlayerCore",
    "PlayerSkill",
    "PlayerInventoryItem",
    "PlayerEquipment",
]
