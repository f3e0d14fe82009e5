"""
Equipment catalog.

Every equippable item with the slot it occupies and the bonus percentages
copied onto the slot row when it is equipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from src.database.models.enums import EquipmentSlot


@dataclass(frozen=True)
class CatalogItem:
    item_type: str
    slot: EquipmentSlot
    efficiency_bonus: int
    experience_bonus: int


EQUIPMENT_CATALOG: Mapping[str, CatalogItem] = MappingProxyType(
    {
        item.item_type: item
        for item in (
            CatalogItem("iron_pickaxe", EquipmentSlot.TOOL, 15, 10),
            CatalogItem("steel_pickaxe", EquipmentSlot.TOOL, 25, 15),
            CatalogItem("mining_helmet", EquipmentSlot.HELMET, 5, 5),
            CatalogItem("fishing_rod", EquipmentSlot.TOOL, 10, 8),
            CatalogItem("fly_fishing_rod", EquipmentSlot.TOOL, 20, 12),
            CatalogItem("iron_axe", EquipmentSlot.TOOL, 15, 10),
            CatalogItem("steel_axe", EquipmentSlot.TOOL, 25, 15),
            CatalogItem("cooking_pot", EquipmentSlot.TOOL, 12, 8),
            CatalogItem("chef_hat", EquipmentSlot.HELMET, 8, 12),
        )
    }
)


def get_catalog_item(item_type: str) -> Optional[CatalogItem]:
    return EQUIPMENT_CATALOG.get(item_type)
