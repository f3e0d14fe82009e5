"""
Skill store interface.

Purpose
-------
Abstract persistence boundary for players, skills, inventory and equipment.
Services never talk to SQLAlchemy directly; they open a unit of work, read
snapshots, and write patch-style updates.

Unit of Work Contract
---------------------
- ``async with store.unit_of_work() as uow:`` opens one transaction
- Reads inside a unit of work see its own pending writes
- Clean exit commits; an exception discards every write of the unit
- Committed writes are visible to every later unit of work

Snapshots returned by the unit of work are immutable domain models
(``SkillState``, ``InventoryStack``, ``EquipmentItem``, ``PlayerProfile``).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, AsyncContextManager, List, Optional

from src.database.models.enums import EquipmentSlot, SkillType
from src.domain.models.player import EquipmentItem, InventoryStack, PlayerProfile
from src.domain.models.skill import SkillState


class SkillUnitOfWork(ABC):
    """Operations available inside one transaction."""

    # ------------------------------------------------------------------ #
    # Players
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def get_player(self, player_id: str) -> Optional[PlayerProfile]:
        ...

    @abstractmethod
    async def create_player(self, profile: PlayerProfile) -> PlayerProfile:
        ...

    @abstractmethod
    async def touch_player(self, player_id: str, now: datetime) -> PlayerProfile:
        """
        Set ``last_seen`` to ``now``.

        Raises:
            NotFoundError: If the player does not exist
        """

    # ------------------------------------------------------------------ #
    # Skills
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def get_skill(
        self, player_id: str, skill_type: SkillType, for_update: bool = False
    ) -> Optional[SkillState]:
        """Fetch one skill; ``for_update`` locks the row until the unit ends."""

    @abstractmethod
    async def list_skills(self, player_id: str) -> List[SkillState]:
        """All skills of a player in ``SkillType`` declaration order."""

    @abstractmethod
    async def create_skill(self, state: SkillState) -> SkillState:
        ...

    @abstractmethod
    async def update_skill(
        self, player_id: str, skill_type: SkillType, **patch: Any
    ) -> SkillState:
        """
        Apply a patch of ``SkillState`` fields.

        Raises:
            SkillNotFoundError: If the skill row does not exist
        """

    # ------------------------------------------------------------------ #
    # Inventory
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def get_inventory_item(
        self, player_id: str, item_type: str
    ) -> Optional[InventoryStack]:
        ...

    @abstractmethod
    async def list_inventory(self, player_id: str) -> List[InventoryStack]:
        """All stacks of a player sorted by item type."""

    @abstractmethod
    async def upsert_inventory_item(
        self, player_id: str, item_type: str, quantity: int, now: datetime
    ) -> InventoryStack:
        """Create the stack or overwrite its quantity."""

    @abstractmethod
    async def increment_inventory_item(
        self, player_id: str, item_type: str, amount: int, now: datetime
    ) -> InventoryStack:
        """Add ``amount`` to the stack, creating it at zero first."""

    # ------------------------------------------------------------------ #
    # Equipment
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def list_equipment(self, player_id: str) -> List[EquipmentItem]:
        """All slots of a player in ``EquipmentSlot`` declaration order."""

    @abstractmethod
    async def create_equipment(self, item: EquipmentItem) -> EquipmentItem:
        ...

    @abstractmethod
    async def update_equipment(
        self, player_id: str, slot: EquipmentSlot, **patch: Any
    ) -> EquipmentItem:
        """
        Apply a patch of ``EquipmentItem`` fields.

        Raises:
            NotFoundError: If the slot row does not exist
        """


class SkillStore(ABC):
    """Factory of units of work."""

    @abstractmethod
    def unit_of_work(self) -> AsyncContextManager[SkillUnitOfWork]:
        ...

    async def close(self) -> None:
        """Release resources held by the store."""
