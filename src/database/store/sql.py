"""
SQLAlchemy skill store.

Each unit of work is one ``DatabaseService.get_transaction()`` block: commit
on clean exit, rollback on any exception. Skill reads taken for a
read-modify-write use ``SELECT ... FOR UPDATE`` so concurrent writers for the
same row serialize in PostgreSQL.
"""

from __future__ import annotations

import dataclasses
from contextlib import asynccontextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Any, AsyncIterator, List, Optional

from src.core.database.service import DatabaseService
from src.core.logging.logger import get_logger
from src.database.models.enums import EquipmentSlot, SkillType
from src.database.models.player import (
    PlayerCore,
    PlayerEquipment,
    PlayerInventoryItem,
    PlayerSkill,
)
from src.database.store.base import SkillStore, SkillUnitOfWork
from src.domain.models.player import EquipmentItem, InventoryStack, PlayerProfile
from src.domain.models.skill import SkillState
from src.modules.shared.base_repository import BaseRepository
from src.modules.shared.exceptions import NotFoundError, SkillNotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

_SKILL_ORDER = {skill: index for index, skill in enumerate(SkillType)}
_SLOT_ORDER = {slot: index for index, slot in enumerate(EquipmentSlot)}

# Patch values stored as enum strings.
_ENUM_FIELDS = {"skill_type", "slot"}


def _column_values(patch: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value.value if key in _ENUM_FIELDS and hasattr(value, "value") else value
        for key, value in patch.items()
    }


class _SqlUnitOfWork(SkillUnitOfWork):
    def __init__(self, session: AsyncSession, store: SqlAlchemySkillStore) -> None:
        self._session = session
        self._players = store.players
        self._skills = store.skills
        self._inventory = store.inventory
        self._equipment = store.equipment

    # Players

    async def get_player(self, player_id: str) -> Optional[PlayerProfile]:
        row = await self._players.get(self._session, player_id)
        return PlayerProfile.from_db(row) if row else None

    async def create_player(self, profile: PlayerProfile) -> PlayerProfile:
        row = PlayerCore(
            id=profile.player_id,
            name=profile.name,
            last_seen=profile.last_seen,
            created_at=profile.created_at,
        )
        await self._players.add(self._session, row)
        return PlayerProfile.from_db(row)

    async def touch_player(self, player_id: str, now: datetime) -> PlayerProfile:
        row = await DatabaseService.get_locked_entity(self._session, PlayerCore, player_id)
        if row is None:
            raise NotFoundError("Player", player_id)
        row.last_seen = now
        await self._players.flush(self._session)
        return PlayerProfile.from_db(row)

    # Skills

    async def _skill_row(
        self, player_id: str, skill_type: SkillType, for_update: bool
    ) -> Optional[PlayerSkill]:
        return await self._skills.find_one_where(
            self._session,
            PlayerSkill.player_id == player_id,
            PlayerSkill.skill_type == SkillType(skill_type).value,
            for_update=for_update,
        )

    async def get_skill(
        self, player_id: str, skill_type: SkillType, for_update: bool = False
    ) -> Optional[SkillState]:
        row = await self._skill_row(player_id, skill_type, for_update)
        return SkillState.from_db(row) if row else None

    async def list_skills(self, player_id: str) -> List[SkillState]:
        rows = await self._skills.find_many_where(
            self._session, PlayerSkill.player_id == player_id
        )
        states = [SkillState.from_db(row) for row in rows]
        return sorted(states, key=lambda s: _SKILL_ORDER[s.skill_type])

    async def create_skill(self, state: SkillState) -> SkillState:
        row = PlayerSkill(
            player_id=state.player_id,
            skill_type=state.skill_type.value,
            level=state.level,
            experience=state.experience,
            is_active=state.is_active,
            last_action_time=state.last_action_time,
            current_resource=state.current_resource,
        )
        await self._skills.add(self._session, row)
        return SkillState.from_db(row)

    async def update_skill(
        self, player_id: str, skill_type: SkillType, **patch: Any
    ) -> SkillState:
        row = await self._skill_row(player_id, skill_type, for_update=True)
        if row is None:
            raise SkillNotFoundError(player_id, SkillType(skill_type).value)

        # Validate the patch against the domain model before touching the row.
        dataclasses.replace(SkillState.from_db(row), **patch)

        for key, value in _column_values(patch).items():
            setattr(row, key, value)
        await self._skills.flush(self._session)
        return SkillState.from_db(row)

    # Inventory

    async def _inventory_row(
        self, player_id: str, item_type: str, for_update: bool = False
    ) -> Optional[PlayerInventoryItem]:
        return await self._inventory.find_one_where(
            self._session,
            PlayerInventoryItem.player_id == player_id,
            PlayerInventoryItem.item_type == item_type,
            for_update=for_update,
        )

    async def get_inventory_item(
        self, player_id: str, item_type: str
    ) -> Optional[InventoryStack]:
        row = await self._inventory_row(player_id, item_type)
        return InventoryStack.from_db(row) if row else None

    async def list_inventory(self, player_id: str) -> List[InventoryStack]:
        rows = await self._inventory.find_many_where(
            self._session,
            PlayerInventoryItem.player_id == player_id,
            order_by=PlayerInventoryItem.item_type,
        )
        return [InventoryStack.from_db(row) for row in rows]

    async def upsert_inventory_item(
        self, player_id: str, item_type: str, quantity: int, now: datetime
    ) -> InventoryStack:
        row = await self._inventory_row(player_id, item_type, for_update=True)
        if row is None:
            row = PlayerInventoryItem(
                player_id=player_id, item_type=item_type, quantity=quantity, updated_at=now
            )
            await self._inventory.add(self._session, row)
        else:
            row.quantity = quantity
            row.updated_at = now
            await self._inventory.flush(self._session)
        return InventoryStack.from_db(row)

    async def increment_inventory_item(
        self, player_id: str, item_type: str, amount: int, now: datetime
    ) -> InventoryStack:
        row = await self._inventory_row(player_id, item_type, for_update=True)
        if row is None:
            row = PlayerInventoryItem(
                player_id=player_id, item_type=item_type, quantity=0, updated_at=now
            )
            await self._inventory.add(self._session, row)

        row.quantity = row.quantity + amount
        row.updated_at = now
        await self._inventory.flush(self._session)
        return InventoryStack.from_db(row)

    # Equipment

    async def list_equipment(self, player_id: str) -> List[EquipmentItem]:
        rows = await self._equipment.find_many_where(
            self._session, PlayerEquipment.player_id == player_id
        )
        items = [EquipmentItem.from_db(row) for row in rows]
        return sorted(items, key=lambda i: _SLOT_ORDER[i.slot])

    async def create_equipment(self, item: EquipmentItem) -> EquipmentItem:
        row = PlayerEquipment(
            player_id=item.player_id,
            slot=item.slot.value,
            item_type=item.item_type,
            efficiency_bonus=item.efficiency_bonus,
            experience_bonus=item.experience_bonus,
        )
        await self._equipment.add(self._session, row)
        return EquipmentItem.from_db(row)

    async def update_equipment(
        self, player_id: str, slot: EquipmentSlot, **patch: Any
    ) -> EquipmentItem:
        slot = EquipmentSlot(slot)
        row = await self._equipment.find_one_where(
            self._session,
            PlayerEquipment.player_id == player_id,
            PlayerEquipment.slot == slot.value,
            for_update=True,
        )
        if row is None:
            raise NotFoundError("EquipmentSlot", f"{player_id}/{slot.value}")

        for key, value in _column_values(patch).items():
            setattr(row, key, value)
        await self._equipment.flush(self._session)
        return EquipmentItem.from_db(row)


class SqlAlchemySkillStore(SkillStore):
    """
    PostgreSQL-backed store.

    ``DatabaseService`` must be initialized before the first unit of work.
    """

    def __init__(self) -> None:
        self.players = BaseRepository[PlayerCore](
            model_class=PlayerCore,
            logger=get_logger(f"{__name__}.PlayerCoreRepository"),
        )
        self.skills = BaseRepository[PlayerSkill](
            model_class=PlayerSkill,
            logger=get_logger(f"{__name__}.PlayerSkillRepository"),
        )
        self.inventory = BaseRepository[PlayerInventoryItem](
            model_class=PlayerInventoryItem,
            logger=get_logger(f"{__name__}.PlayerInventoryRepository"),
        )
        self.equipment = BaseRepository[PlayerEquipment](
            model_class=PlayerEquipment,
            logger=get_logger(f"{__name__}.PlayerEquipmentRepository"),
        )

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[SkillUnitOfWork]:
        async with DatabaseService.get_transaction() as session:
            yield _SqlUnitOfWork(session, self)

    async def close(self) -> None:
        await DatabaseService.shutdown()
