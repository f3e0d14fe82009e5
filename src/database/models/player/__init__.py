"""
Player model package.

Splits player state into focused tables:
- PlayerCore: identity and presence
- PlayerSkill: per-skill level, experience and training state
- PlayerInventoryItem: gathered item stacks
- PlayerEquipment: slot contents and bonuses
"""

from .player_core import PlayerCore
from .player_equipment import PlayerEquipment
from .player_inventory import PlayerInventoryItem
from .player_skill import PlayerSkill

__all__ = [
    "PlayerCore",
    "PlayerSkill",
    "PlayerInventoryItem",
    "PlayerEquipment",
]
