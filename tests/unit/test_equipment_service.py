"""
Unit tests for EquipmentService.

Tests equipping catalog items, clearing slots, bonus aggregation and
settling pending progress before a gear change.
"""

from datetime import timedelta

import pytest

from src.database.models.enums import EquipmentSlot, SkillType
from src.database.store.memory import _InMemoryUnitOfWork
from src.modules.equipment import EQUIPMENT_CATALOG
from src.modules.shared.exceptions import InvalidOperationError, NotFoundError, ValidationError


class TestEquip:
    async def test_equip_copies_catalog_bonuses(self, equipment_service, registered_player):
        item = await equipment_service.equip(registered_player, "iron_pickaxe")

        assert item.slot is EquipmentSlot.TOOL
        assert item.item_type == "iron_pickaxe"
        assert item.efficiency_bonus == 15
        assert item.experience_bonus == 10

    async def test_equip_replaces_slot_contents(self, equipment_service, registered_player):
        await equipment_service.equip(registered_player, "iron_pickaxe")
        await equipment_service.equip(registered_player, "fishing_rod")

        tool = (await equipment_service.list_equipment(registered_player))[0]
        assert tool.item_type == "fishing_rod"

    async def test_unknown_item(self, equipment_service, registered_player):
        with pytest.raises(InvalidOperationError):
            await equipment_service.equip(registered_player, "rubber_duck")

    async def test_unknown_player(self, equipment_service):
        with pytest.raises(NotFoundError):
            await equipment_service.equip("ghost", "iron_axe")

    async def test_event(self, equipment_service, registered_player, captured_events):
        captured_events.clear()

        await equipment_service.equip(registered_player, "chef_hat")

        assert captured_events == [
            (
                "equipment.changed",
                {
                    "player_id": registered_player,
                    "action": "equip",
                    "slot": "helmet",
                    "item_type": "chef_hat",
                    "efficiency_bonus": 8,
                    "experience_bonus": 12,
                },
            )
        ]

    def test_catalog_slots(self):
        assert EQUIPMENT_CATALOG["mining_helmet"].slot is EquipmentSlot.HELMET
        assert all(item.efficiency_bonus >= 0 for item in EQUIPMENT_CATALOG.values())


class TestUnequip:
    async def test_clears_slot(self, equipment_service, registered_player):
        await equipment_service.equip(registered_player, "mining_helmet")

        item = await equipment_service.unequip(registered_player, "helmet")

        assert item.is_empty
        assert item.efficiency_bonus == 0
        assert item.experience_bonus == 0

    async def test_empty_slot_is_noop(self, equipment_service, registered_player):
        item = await equipment_service.unequip(registered_player, EquipmentSlot.BOOTS)
        assert item.is_empty

    async def test_unknown_slot(self, equipment_service, registered_player):
        with pytest.raises(ValidationError):
            await equipment_service.unequip(registered_player, "cape")


class TestBonuses:
    async def test_only_relevant_items_count(self, equipment_service, registered_player):
        await equipment_service.equip(registered_player, "fishing_rod")
        await equipment_service.equip(registered_player, "mining_helmet")

        mining = await equipment_service.bonuses_for(registered_player, "mining")
        fishing = await equipment_service.bonuses_for(registered_player, SkillType.FISHING)

        assert (mining.efficiency_pct, mining.experience_pct) == (5, 5)
        assert (fishing.efficiency_pct, fishing.experience_pct) == (10, 8)

    async def test_gear_change_settles_with_old_gear(
        self, equipment_service, skill_service, store, registered_player, now
    ):
        await skill_service.start_training(registered_player, SkillType.MINING, now)

        await equipment_service.equip(
            registered_player, "iron_pickaxe", now=now + timedelta(minutes=1)
        )
        await skill_service.tick(registered_player, now + timedelta(minutes=2))

        async with store.unit_of_work() as uow:
            mining = await uow.get_skill(registered_player, SkillType.MINING)
        # 30 bare, then 30 * 1.10
        assert mining.experience == 63

    async def test_settlement_and_gear_update_share_one_lock_hold(
        self, equipment_service, skill_service, store, locks, registered_player, now, mocker
    ):
        await skill_service.start_training(registered_player, SkillType.MINING, now)
        hold = mocker.spy(locks, "hold")
        seen_at_update = []
        original_update = _InMemoryUnitOfWork.update_equipment

        async def recording_update(uow, player_id, *args, **kwargs):
            mining = await uow.get_skill(player_id, SkillType.MINING)
            seen_at_update.append((locks.is_locked(player_id), mining.experience))
            return await original_update(uow, player_id, *args, **kwargs)

        mocker.patch.object(_InMemoryUnitOfWork, "update_equipment", recording_update)

        await equipment_service.equip(
            registered_player, "iron_pickaxe", now=now + timedelta(minutes=1)
        )

        assert hold.call_count == 1
        assert seen_at_update == [(True, 30)]
        assert len(locks) == 0

    async def test_settlement_events_published_after_gear_change(
        self, equipment_service, skill_service, registered_player, now, captured_events
    ):
        await skill_service.start_training(registered_player, SkillType.MINING, now)

        await equipment_service.unequip(
            registered_player, EquipmentSlot.TOOL, now=now + timedelta(minutes=1)
        )

        names = [name for name, _ in captured_events]
        assert names.index("skill.progress_applied") < names.index("equipment.changed")
