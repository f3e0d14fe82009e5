"""
Equipment Module
================

- EQUIPMENT_CATALOG: equippable items with slot and bonuses
- EquipmentService: equip/unequip, slot listing and skill bonuses
"""

from .catalog import EQUIPMENT_CATALOG, CatalogItem, get_catalog_item
from .service import EquipmentService

__all__ = [
    "EQUIPMENT_CATALOG",
    "CatalogItem",
    "get_catalog_item",
    "EquipmentService",
]
