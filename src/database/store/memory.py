"""
In-memory skill store.

Keeps committed state in dictionaries and stages each unit of work's writes
in an overlay that is merged on clean exit. Used by unit tests and by local
runs without PostgreSQL.
"""

from __future__ import annotations

import dataclasses
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple, TypeVar

from src.core.logging.logger import get_logger
from src.database.models.enums import EquipmentSlot, SkillType
from src.database.store.base import SkillStore, SkillUnitOfWork
from src.domain.models.player import EquipmentItem, InventoryStack, PlayerProfile
from src.domain.models.skill import SkillState
from src.modules.shared.exceptions import (
    InvalidOperationError,
    NotFoundError,
    SkillNotFoundError,
)

logger = get_logger(__name__)

K = TypeVar("K")
V = TypeVar("V")

SkillKey = Tuple[str, SkillType]
InventoryKey = Tuple[str, str]
EquipmentKey = Tuple[str, EquipmentSlot]


def _lookup(staged: Dict[K, V], committed: Dict[K, V], key: K) -> Optional[V]:
    if key in staged:
        return staged[key]
    return committed.get(key)


class _InMemoryUnitOfWork(SkillUnitOfWork):
    def __init__(self, store: InMemorySkillStore) -> None:
        self._store = store
        self._players: Dict[str, PlayerProfile] = {}
        self._skills: Dict[SkillKey, SkillState] = {}
        self._inventory: Dict[InventoryKey, InventoryStack] = {}
        self._equipment: Dict[EquipmentKey, EquipmentItem] = {}

    def commit(self) -> None:
        self._store._players.update(self._players)
        self._store._skills.update(self._skills)
        self._store._inventory.update(self._inventory)
        self._store._equipment.update(self._equipment)

    # Players

    async def get_player(self, player_id: str) -> Optional[PlayerProfile]:
        return _lookup(self._players, self._store._players, player_id)

    async def create_player(self, profile: PlayerProfile) -> PlayerProfile:
        if await self.get_player(profile.player_id) is not None:
            raise InvalidOperationError(
                "create_player", f"player {profile.player_id} already exists"
            )
        self._players[profile.player_id] = profile
        return profile

    async def touch_player(self, player_id: str, now: datetime) -> PlayerProfile:
        profile = await self.get_player(player_id)
        if profile is None:
            raise NotFoundError("Player", player_id)
        updated = dataclasses.replace(profile, last_seen=now)
        self._players[player_id] = updated
        return updated

    # Skills

    async def get_skill(
        self, player_id: str, skill_type: SkillType, for_update: bool = False
    ) -> Optional[SkillState]:
        return _lookup(self._skills, self._store._skills, (player_id, SkillType(skill_type)))

    async def list_skills(self, player_id: str) -> List[SkillState]:
        skills = []
        for skill_type in SkillType:
            state = await self.get_skill(player_id, skill_type)
            if state is not None:
                skills.append(state)
        return skills

    async def create_skill(self, state: SkillState) -> SkillState:
        self._skills[(state.player_id, state.skill_type)] = state
        return state

    async def update_skill(
        self, player_id: str, skill_type: SkillType, **patch: Any
    ) -> SkillState:
        skill_type = SkillType(skill_type)
        state = await self.get_skill(player_id, skill_type)
        if state is None:
            raise SkillNotFoundError(player_id, skill_type.value)
        updated = dataclasses.replace(state, **patch)
        self._skills[(player_id, skill_type)] = updated
        return updated

    # Inventory

    async def get_inventory_item(
        self, player_id: str, item_type: str
    ) -> Optional[InventoryStack]:
        return _lookup(self._inventory, self._store._inventory, (player_id, item_type))

    async def list_inventory(self, player_id: str) -> List[InventoryStack]:
        keys = {
            key
            for key in (*self._store._inventory, *self._inventory)
            if key[0] == player_id
        }
        stacks = [_lookup(self._inventory, self._store._inventory, key) for key in keys]
        return sorted((s for s in stacks if s is not None), key=lambda s: s.item_type)

    async def upsert_inventory_item(
        self, player_id: str, item_type: str, quantity: int, now: datetime
    ) -> InventoryStack:
        stack = InventoryStack(
            player_id=player_id, item_type=item_type, quantity=quantity, updated_at=now
        )
        self._inventory[(player_id, item_type)] = stack
        return stack

    async def increment_inventory_item(
        self, player_id: str, item_type: str, amount: int, now: datetime
    ) -> InventoryStack:
        current = await self.get_inventory_item(player_id, item_type)
        if current is None:
            current = await self.upsert_inventory_item(player_id, item_type, 0, now)
        return await self.upsert_inventory_item(
            player_id, item_type, current.quantity + amount, now
        )

    # Equipment

    async def list_equipment(self, player_id: str) -> List[EquipmentItem]:
        items = []
        for slot in EquipmentSlot:
            item = _lookup(self._equipment, self._store._equipment, (player_id, slot))
            if item is not None:
                items.append(item)
        return items

    async def create_equipment(self, item: EquipmentItem) -> EquipmentItem:
        self._equipment[(item.player_id, item.slot)] = item
        return item

    async def update_equipment(
        self, player_id: str, slot: EquipmentSlot, **patch: Any
    ) -> EquipmentItem:
        slot = EquipmentSlot(slot)
        item = _lookup(self._equipment, self._store._equipment, (player_id, slot))
        if item is None:
            raise NotFoundError("EquipmentSlot", f"{player_id}/{slot.value}")
        updated = dataclasses.replace(item, **patch)
        self._equipment[(player_id, slot)] = updated
        return updated


class InMemorySkillStore(SkillStore):
    """
    Dictionary-backed store.

    Writes become visible to other units of work only when the writing unit
    exits cleanly. Committing has no await point, so it is atomic with respect
    to other coroutines on the loop.
    """

    def __init__(self) -> None:
        self._players: Dict[str, PlayerProfile] = {}
        self._skills: Dict[SkillKey, SkillState] = {}
        self._inventory: Dict[InventoryKey, InventoryStack] = {}
        self._equipment: Dict[EquipmentKey, EquipmentItem] = {}

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[SkillUnitOfWork]:
        uow = _InMemoryUnitOfWork(self)
        try:
            yield uow
        except Exception:
            logger.debug("In-memory unit of work discarded")
            raise
        uow.commit()
