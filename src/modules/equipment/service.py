"""
Equipment Service
=================

Purpose
-------
Manages what a player wears in each slot and exposes the bonuses relevant to
a skill.

Domain
------
- Equip a catalog item into its slot, copying the catalog bonuses
- Clear a slot
- List slots
- Aggregate bonuses for a skill

Gear changes take the same per-player lock as reconciliation. When the
caller passes ``now``, pending progress is settled with the old gear first so
that the new bonuses only apply from that instant on.

Events
------
- ``equipment.changed``
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Any, AsyncIterator, List, Optional

from src.core.validation.input_validator import InputValidator
from src.domain.models.player import EquipmentItem
from src.domain.models.skill import EquipmentBonus
from src.modules.equipment.catalog import get_catalog_item
from src.modules.shared.base_service import BaseService
from src.modules.shared.exceptions import InvalidOperationError
from src.modules.shared.validators import validate_player_exists
from src.modules.skills.bonuses import aggregate_bonuses
from src.modules.skills.locks import PlayerLockRegistry

if TYPE_CHECKING:
    from logging import Logger

    from src.core.config.manager import ConfigManager
    from src.core.event.bus import EventBus
    from src.database.store.base import SkillStore
    from src.modules.skills.service import SkillReconciliationService


class EquipmentService(BaseService):
    """
    Equipment slots and bonuses.

    Public Methods
    --------------
    - equip() -> Put a catalog item into its slot
    - unequip() -> Clear a slot
    - list_equipment() -> All slots in slot order
    - bonuses_for() -> Summed bonuses relevant to a skill
    """

    def __init__(
        self,
        store: SkillStore,
        config_manager: type[ConfigManager],
        event_bus: EventBus,
        logger: Logger,
        locks: Optional[PlayerLockRegistry] = None,
        reconciler: Optional[SkillReconciliationService] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._store = store
        self._locks = locks or PlayerLockRegistry()
        self._reconciler = reconciler

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def equip(
        self, player_id: str, item_type: str, now: Optional[datetime] = None
    ) -> EquipmentItem:
        """
        Equip ``item_type`` into the slot the catalog assigns it.

        Replaces whatever the slot held.

        Raises:
            InvalidOperationError: If the item is not in the catalog
            NotFoundError: If the player does not exist
        """
        player_id = InputValidator.validate_player_id(player_id)
        item_type = InputValidator.validate_string(item_type, field_name="item_type", max_length=50)
        catalog_item = get_catalog_item(item_type)
        if catalog_item is None:
            raise InvalidOperationError("equip", f"'{item_type}' is not equippable")

        async with self._gear_change(player_id, now):
            async with self._store.unit_of_work() as uow:
                validate_player_exists(await uow.get_player(player_id), player_id)
                item = await uow.update_equipment(
                    player_id,
                    catalog_item.slot,
                    item_type=catalog_item.item_type,
                    efficiency_bonus=catalog_item.efficiency_bonus,
                    experience_bonus=catalog_item.experience_bonus,
                )

        self.log_operation(
            "equip", player_id=player_id, item_type=item_type, slot=item.slot.value
        )
        await self._emit_changed(player_id, item, action="equip")
        return item

    async def unequip(
        self, player_id: str, slot: Any, now: Optional[datetime] = None
    ) -> EquipmentItem:
        """
        Empty ``slot``. Unequipping an empty slot is a no-op.

        Raises:
            ValidationError: If slot is not a known slot
            NotFoundError: If the player does not exist
        """
        player_id = InputValidator.validate_player_id(player_id)
        slot = InputValidator.validate_equipment_slot(slot)

        async with self._gear_change(player_id, now):
            async with self._store.unit_of_work() as uow:
                validate_player_exists(await uow.get_player(player_id), player_id)
                item = await uow.update_equipment(
                    player_id,
                    slot,
                    item_type=None,
                    efficiency_bonus=0,
                    experience_bonus=0,
                )

        self.log_operation("unequip", player_id=player_id, slot=slot.value)
        await self._emit_changed(player_id, item, action="unequip")
        return item

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def list_equipment(self, player_id: str) -> List[EquipmentItem]:
        player_id = InputValidator.validate_player_id(player_id)

        async with self._store.unit_of_work() as uow:
            validate_player_exists(await uow.get_player(player_id), player_id)
            return await uow.list_equipment(player_id)

    async def bonuses_for(self, player_id: str, skill_type: Any) -> EquipmentBonus:
        """Bonuses of equipped items relevant to ``skill_type``."""
        skill = InputValidator.validate_skill_type(skill_type)
        equipment = await self.list_equipment(player_id)
        return aggregate_bonuses(equipment, skill)

    # ========================================================================
    # INTERNAL
    # ========================================================================

    @asynccontextmanager
    async def _gear_change(self, player_id: str, now: Optional[datetime]) -> AsyncIterator[None]:
        # Settlement and the slot update share one critical section.
        if now is not None and self._reconciler is not None:
            async with self._reconciler.settled(player_id, now):
                yield
        else:
            async with self._locks.hold(player_id):
                yield

    async def _emit_changed(self, player_id: str, item: EquipmentItem, action: str) -> None:
        await self.emit_event(
            "equipment.changed",
            {"player_id": player_id, "action": action, **item.to_dict()},
        )
