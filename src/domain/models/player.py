"""
Player domain value objects.

Immutable snapshots of a player's identity, inventory stacks and equipment
slots, built from ORM rows via ``from_db`` or directly by the in-memory store.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from src.database.models.enums import EquipmentSlot
from src.domain.models.base import (
    ensure_utc,
    validate_non_negative,
    validate_not_empty,
)

if TYPE_CHECKING:
    from src.database.models.player import (
        PlayerCore,
        PlayerEquipment,
        PlayerInventoryItem,
    )


@dataclass(frozen=True)
class PlayerProfile:
    """
    Player identity and presence.

    Attributes
    ----------
    player_id : str
        Identifier supplied by the session layer
    name : str
        Display name
    last_seen : datetime
        Last time the player was observed
    created_at : datetime
        Registration time
    """

    player_id: str
    name: str
    last_seen: datetime
    created_at: datetime

    def __post_init__(self) -> None:
        validate_not_empty(self.player_id, "player_id")
        validate_not_empty(self.name, "name")

    @classmethod
    def from_db(cls, row: "PlayerCore") -> PlayerProfile:
        return cls(
            player_id=row.id,
            name=row.name,
            last_seen=ensure_utc(row.last_seen),
            created_at=ensure_utc(row.created_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "last_seen": self.last_seen.isoformat(),
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class InventoryStack:
    """A quantity of one item type owned by a player."""

    player_id: str
    item_type: str
    quantity: int
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        validate_not_empty(self.item_type, "item_type")
        validate_non_negative(self.quantity, "quantity")

    @classmethod
    def from_db(cls, row: "PlayerInventoryItem") -> InventoryStack:
        return cls(
            player_id=row.player_id,
            item_type=row.item_type,
            quantity=row.quantity,
            updated_at=ensure_utc(row.updated_at),
        )


@dataclass(frozen=True)
class EquipmentItem:
    """
    Contents of one equipment slot.

    ``item_type`` is None for an empty slot; bonuses are percentages.
    """

    player_id: str
    slot: EquipmentSlot
    item_type: Optional[str] = None
    efficiency_bonus: int = 0
    experience_bonus: int = 0

    def __post_init__(self) -> None:
        validate_non_negative(self.efficiency_bonus, "efficiency_bonus")
        validate_non_negative(self.experience_bonus, "experience_bonus")

    @property
    def is_empty(self) -> bool:
        return self.item_type is None

    @classmethod
    def from_db(cls, row: "PlayerEquipment") -> EquipmentItem:
        return cls(
            player_id=row.player_id,
            slot=EquipmentSlot(row.slot),
            item_type=row.item_type,
            efficiency_bonus=row.efficiency_bonus,
            experience_bonus=row.experience_bonus,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slot": self.slot.value,
            "item_type": self.item_type,
            "efficiency_bonus": self.efficiency_bonus,
            "experience_bonus": self.experience_bonus,
        }
