"""
Service Container
=================

Purpose
-------
Centralized dependency injection container for domain services. Builds the
progression engine and services once and hands out shared instances.

Responsibilities
----------------
- Initialize all domain services with required dependencies
- Share one skill store, one EventBus and one per-player lock registry
- Manage service lifecycle (initialization, shutdown)

Non-Responsibilities
--------------------
- Database initialization order (delegated to ``src.main``)
- Transport (HTTP, chat) wiring

Architecture Notes
------------------
- Domain services follow the constructor pattern
  ``(store, config_manager, event_bus, logger)``
- ``initialize_service_container()`` / ``shutdown_service_container()``
  manage the process-wide instance
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Dict, Optional

from src.core.logging.logger import get_logger
from src.modules.equipment import EquipmentService
from src.modules.player import PlayerService
from src.modules.skills import (
    PlayerLockRegistry,
    ProgressionEngine,
    SkillReconciliationService,
)

if TYPE_CHECKING:
    from logging import Logger

    from src.core.config.manager import ConfigManager
    from src.core.event.bus import EventBus
    from src.database.store.base import SkillStore

_SERVICE_COUNT = 3


class ServiceContainer:
    """
    Dependency injection container for all domain services.

    Usage:
        container = ServiceContainer(store, ConfigManager, event_bus, logger)
        await container.initialize()

        await container.skills.tick(player_id, now)
    """

    def __init__(
        self,
        store: SkillStore,
        config_manager: type[ConfigManager],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._store = store
        self._config_manager = config_manager
        self._event_bus = event_bus
        self._logger = logger
        self._locks = PlayerLockRegistry()

        self._engine: Optional[ProgressionEngine] = None
        self._players: Optional[PlayerService] = None
        self._skills: Optional[SkillReconciliationService] = None
        self._equipment: Optional[EquipmentService] = None

        self._initialized = False

        self._service_init_times: Dict[str, float] = {}
        self._init_start: Optional[float] = None
        self._init_end: Optional[float] = None

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def initialize(self) -> None:
        """
        Initialize all services.

        Call this during application startup after ConfigManager is loaded.
        """
        if self._initialized:
            self._logger.warning("ServiceContainer already initialized")
            return

        self._init_start = time.perf_counter()
        self._logger.info("Service container initialization starting...")

        self._engine = ProgressionEngine.from_config(self._config_manager)

        self._players = self._create_service("players", PlayerService)
        self._skills = self._create_service(
            "skills",
            SkillReconciliationService,
            engine=self._engine,
            locks=self._locks,
        )
        self._equipment = self._create_service(
            "equipment",
            EquipmentService,
            locks=self._locks,
            reconciler=self._skills,
        )

        self._initialized = True
        self._init_end = time.perf_counter()
        self._logger.info(
            "Service container initialized",
            extra={
                "service_count": len(self._service_init_times),
                "duration_ms": round((self._init_end - self._init_start) * 1000, 3),
            },
        )

    def _create_service(self, name: str, cls: type, **dependencies: Any) -> Any:
        """
        Construct a service with the shared dependencies and record timing.

        Raises:
            Exception: If service initialization fails
        """
        start = time.perf_counter()
        try:
            instance = cls(
                store=self._store,
                config_manager=self._config_manager,
                event_bus=self._event_bus,
                logger=get_logger(f"{cls.__module__}.{cls.__name__}"),
                **dependencies,
            )
        except Exception:
            self._logger.error(f"Failed to initialize {name}", exc_info=True)
            raise

        duration = time.perf_counter() - start
        self._service_init_times[name] = duration
        self._logger.debug(f"Initialized {name} in {duration:.3f}s")
        return instance

    async def shutdown(self) -> None:
        """
        Shutdown all services.

        Waits for background event listeners, then closes the store.
        """
        if not self._initialized:
            return

        self._logger.info("Shutting down service container...")
        await self._event_bus.drain()
        await self._store.close()
        self._initialized = False
        self._logger.info("Service container shut down")

    async def health_check(self) -> Dict[str, bool | float | int | None]:
        return {
            "initialized": self._initialized,
            "service_count": len(self._service_init_times),
            "total_init_time_seconds": (
                round(self._init_end - self._init_start, 3)
                if self._init_start and self._init_end
                else None
            ),
            "all_services_available": self._initialized
            and len(self._service_init_times) == _SERVICE_COUNT,
            "tracked_player_locks": len(self._locks),
        }

    # ========================================================================
    # Services
    # ========================================================================

    @property
    def engine(self) -> ProgressionEngine:
        if not self._initialized or self._engine is None:
            raise RuntimeError("ServiceContainer not initialized. Call initialize() first.")
        return self._engine

    @property
    def players(self) -> PlayerService:
        if not self._initialized or self._players is None:
            raise RuntimeError("ServiceContainer not initialized. Call initialize() first.")
        return self._players

    @property
    def skills(self) -> SkillReconciliationService:
        if not self._initialized or self._skills is None:
            raise RuntimeError("ServiceContainer not initialized. Call initialize() first.")
        return self._skills

    @property
    def equipment(self) -> EquipmentService:
        if not self._initialized or self._equipment is None:
            raise RuntimeError("ServiceContainer not initialized. Call initialize() first.")
        return self._equipment

    @property
    def is_initialized(self) -> bool:
        return self._initialized


# ============================================================================
# Process-wide container
# ============================================================================

_container: Optional[ServiceContainer] = None


def initialize_service_container(
    store: SkillStore,
    config_manager: type[ConfigManager],
    event_bus: EventBus,
    logger: Optional[Logger] = None,
) -> ServiceContainer:
    """
    Create the process-wide container. Call ``await container.initialize()``
    on the returned instance.

    Raises:
        RuntimeError: If a container already exists
    """
    global _container
    if _container is not None:
        raise RuntimeError("Service container already created")

    _container = ServiceContainer(
        store=store,
        config_manager=config_manager,
        event_bus=event_bus,
        logger=logger or get_logger(__name__),
    )
    return _container


def get_service_container() -> ServiceContainer:
    if _container is None:
        raise RuntimeError("Service container not created. Call initialize_service_container().")
    return _container


async def shutdown_service_container() -> None:
    global _container
    if _container is None:
        return
    await _container.shutdown()
    _container = None
