"""
Pytest Configuration and Fixtures for Idle Skills Tests
=======================================================

Purpose
-------
Centralized test fixtures for the test suite: configuration, event bus,
stores, services and the PostgreSQL testcontainer.

Architecture Notes
------------------
- Unit tests run against ``InMemorySkillStore`` (fast, isolated)
- Integration tests run against PostgreSQL started with testcontainers and
  are skipped when Docker is unavailable
- ``ENVIRONMENT=testing`` is set before any ``src`` import so Config and
  logging never write log files
"""

from __future__ import annotations

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from datetime import datetime, timezone  # noqa: E402
from typing import Any, AsyncGenerator, Dict, Generator, List, Tuple  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from src.core.config.config import Config  # noqa: E402
from src.core.config.manager import ConfigManager  # noqa: E402
from src.core.event.bus import EventBus  # noqa: E402
from src.core.logging.logger import get_logger  # noqa: E402
from src.database.store import InMemorySkillStore  # noqa: E402
from src.modules.equipment import EquipmentService  # noqa: E402
from src.modules.player import PlayerService  # noqa: E402
from src.modules.skills import (  # noqa: E402
    PlayerLockRegistry,
    ProgressionEngine,
    SkillReconciliationService,
)

logger = get_logger(__name__)

PLAYER_ID = "player-1"

EVENT_NAMES = (
    "skill.progress_applied",
    "skill.leveled_up",
    "skill.training_started",
    "skill.training_stopped",
    "player.registered",
    "equipment.changed",
)


# ============================================================================
# CORE FIXTURES
# ============================================================================


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def config_manager() -> Generator[type[ConfigManager], None, None]:
    """
    ConfigManager loaded from the repository's ``config/`` directory.

    Overrides set by a test are dropped afterwards.
    """
    ConfigManager.clear_cache()
    ConfigManager.initialize(Config.CONFIG_DIR)
    yield ConfigManager
    ConfigManager.clear_cache()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus(critical_timeout_seconds=1.0, high_timeout_seconds=1.0)


@pytest.fixture
def captured_events(event_bus: EventBus) -> List[Tuple[str, Dict[str, Any]]]:
    """Every domain event published on ``event_bus`` as (name, payload)."""
    captured: List[Tuple[str, Dict[str, Any]]] = []

    def _capture_as(event_name: str):
        def _capture(payload: Dict[str, Any]) -> None:
            captured.append((event_name, payload))

        return _capture

    for name in EVENT_NAMES:
        event_bus.subscribe(name, _capture_as(name), identifier=f"test-capture@{name}")

    return captured


# ============================================================================
# STORE AND SERVICE FIXTURES (Unit Tests)
# ============================================================================


@pytest.fixture
def store() -> InMemorySkillStore:
    return InMemorySkillStore()


@pytest.fixture
def engine() -> ProgressionEngine:
    return ProgressionEngine()


@pytest.fixture
def locks() -> PlayerLockRegistry:
    return PlayerLockRegistry()


@pytest.fixture
def player_service(store, config_manager, event_bus) -> PlayerService:
    return PlayerService(
        store=store,
        config_manager=config_manager,
        event_bus=event_bus,
        logger=get_logger("tests.PlayerService"),
    )


@pytest.fixture
def skill_service(store, engine, config_manager, event_bus, locks) -> SkillReconciliationService:
    return SkillReconciliationService(
        store=store,
        engine=engine,
        config_manager=config_manager,
        event_bus=event_bus,
        logger=get_logger("tests.SkillReconciliationService"),
        locks=locks,
    )


@pytest.fixture
def equipment_service(store, config_manager, event_bus, locks, skill_service) -> EquipmentService:
    return EquipmentService(
        store=store,
        config_manager=config_manager,
        event_bus=event_bus,
        logger=get_logger("tests.EquipmentService"),
        locks=locks,
        reconciler=skill_service,
    )


@pytest_asyncio.fixture
async def registered_player(player_service: PlayerService, now: datetime) -> str:
    """A freshly registered player; returns its id."""
    await player_service.register_player("Tester", now, player_id=PLAYER_ID)
    return PLAYER_ID


# ============================================================================
# TESTCONTAINERS FIXTURES (Integration Tests)
# ============================================================================


@pytest.fixture(scope="session")
def postgres_url() -> Generator[str, None, None]:
    """
    Start a PostgreSQL testcontainer; skip when Docker is unavailable.

    Scope: session (container persists across all tests)
    """
    from testcontainers.postgres import PostgresContainer

    container = PostgresContainer(image="postgres:17-alpine", driver="asyncpg")
    try:
        container.start()
    except Exception as exc:
        pytest.skip(f"PostgreSQL testcontainer unavailable: {exc}")

    url = container.get_connection_url()
    logger.info("PostgreSQL testcontainer started", extra={"url": url})

    yield url

    logger.info("Stopping PostgreSQL testcontainer...")
    container.stop()


@pytest_asyncio.fixture
async def sql_store(postgres_url: str) -> AsyncGenerator[Any, None]:
    """
    ``SqlAlchemySkillStore`` on a freshly created schema.

    Scope: function (schema dropped and recreated per test)
    """
    from src.core.database.service import DatabaseService
    from src.database.store import SqlAlchemySkillStore

    await DatabaseService.initialize(postgres_url)
    await DatabaseService.drop_schema()
    await DatabaseService.create_schema()

    yield SqlAlchemySkillStore()

    await DatabaseService.shutdown()
