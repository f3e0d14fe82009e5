"""
Unit tests for ServiceContainer.

Tests service wiring, lifecycle and the process-wide container helpers.
"""

from datetime import timedelta

import pytest

from src.core.logging.logger import get_logger
from src.core.services import container as container_module
from src.core.services.container import (
    ServiceContainer,
    get_service_container,
    initialize_service_container,
    shutdown_service_container,
)
from src.database.models.enums import SkillType


@pytest.fixture
def container(store, config_manager, event_bus):
    return ServiceContainer(
        store=store,
        config_manager=config_manager,
        event_bus=event_bus,
        logger=get_logger("tests.ServiceContainer"),
    )


@pytest.fixture
def reset_global_container():
    container_module._container = None
    yield
    container_module._container = None


class TestLifecycle:
    def test_services_unavailable_before_initialize(self, container):
        assert not container.is_initialized
        with pytest.raises(RuntimeError):
            container.skills

    async def test_initialize_wires_services(self, container):
        await container.initialize()

        health = await container.health_check()
        assert health["initialized"]
        assert health["service_count"] == 3
        assert health["all_services_available"]
        assert container.engine.live_rate(SkillType.MINING) == 30

    async def test_initialize_twice_is_noop(self, container):
        await container.initialize()
        skills = container.skills

        await container.initialize()

        assert container.skills is skills

    async def test_services_share_state(self, container, now):
        await container.initialize()

        await container.players.register_player("Ayla", now, player_id="ayla")
        await container.skills.start_training("ayla", SkillType.MINING, now)
        await container.equipment.equip("ayla", "iron_pickaxe", now=now + timedelta(minutes=1))

        views = await container.skills.get_skills("ayla")
        assert views[0].experience == 30

    async def test_engine_follows_config_overrides(self, container, config_manager):
        config_manager.set("skills.live_rates.mining", 90)

        await container.initialize()

        assert container.engine.live_rate(SkillType.MINING) == 90

    async def test_shutdown_closes_store(self, container, store, mocker):
        close = mocker.patch.object(store, "close", new_callable=mocker.AsyncMock)
        await container.initialize()

        await container.shutdown()

        close.assert_awaited_once()
        assert not container.is_initialized


class TestGlobalContainer:
    async def test_create_get_shutdown(
        self, store, config_manager, event_bus, reset_global_container
    ):
        created = initialize_service_container(store, config_manager, event_bus)

        assert get_service_container() is created
        with pytest.raises(RuntimeError):
            initialize_service_container(store, config_manager, event_bus)

        await created.initialize()
        await shutdown_service_container()

        with pytest.raises(RuntimeError):
            get_service_container()

    async def test_shutdown_without_container(self, reset_global_container):
        await shutdown_service_container()
