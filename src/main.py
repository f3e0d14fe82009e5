"""
Idle Skills - Application Entry Point
=====================================

``python -m src.main`` boots the backend and idles until SIGINT/SIGTERM:

1. validate static config (environment, ``.env``)
2. load YAML balance config
3. build the skill store (``STORE_BACKEND=sql`` creates the schema)
4. wire the service container around one EventBus

Transports (HTTP, chat) attach to the running container through
``get_service_container()``; none ship with this package.
"""

import asyncio
import signal
import sys
from typing import Optional

from src.core.config.config import Config
from src.core.config.manager import ConfigManager
from src.core.database.service import DatabaseService
from src.core.event.bus import EventBus
from src.core.logging.logger import get_logger, shutdown_logging
from src.core.services.container import (
    ServiceContainer,
    initialize_service_container,
    shutdown_service_container,
)
from src.database.store import InMemorySkillStore, SkillStore, SqlAlchemySkillStore

logger = get_logger(__name__)


async def _build_store() -> SkillStore:
    if Config.STORE_BACKEND == "memory":
        logger.warning("Using in-memory store; progress is lost on exit")
        return InMemorySkillStore()

    await DatabaseService.initialize()
    await DatabaseService.create_schema()
    return SqlAlchemySkillStore()


async def _startup() -> ServiceContainer:
    logger.info("Idle Skills starting", extra=Config.get_config_summary())

    try:
        Config.validate()
        ConfigManager.initialize()
    except Exception as exc:
        logger.critical(f"Configuration failed to load: {exc}", exc_info=True)
        raise
    logger.info("✓ Configuration loaded", extra={"balance_keys": len(ConfigManager.get_all_keys())})

    try:
        store = await _build_store()
    except Exception as exc:
        logger.critical(f"Store initialization failed ({Config.STORE_BACKEND}): {exc}", exc_info=True)
        raise
    logger.info(f"✓ Store ready ({Config.STORE_BACKEND})")

    container = initialize_service_container(
        store=store,
        config_manager=ConfigManager,
        event_bus=EventBus(ConfigManager),
        logger=get_logger("src.core.services.container"),
    )
    await container.initialize()
    logger.info("✓ Services ready", extra=await container.health_check())
    return container


async def _shutdown() -> None:
    # Each step runs even if an earlier one failed.
    for label, step in (
        ("service container", shutdown_service_container),
        ("database", DatabaseService.shutdown),
    ):
        try:
            await step()
        except Exception as exc:
            logger.error(f"{label} shutdown error: {exc}", exc_info=True)
    logger.info("Idle Skills stopped")


async def main(stop_event: Optional[asyncio.Event] = None) -> None:
    """Start, wait for ``stop_event``, then shut down."""
    stop_event = stop_event or asyncio.Event()

    try:
        await _startup()
        logger.info("Idle Skills ready")
        await stop_event.wait()
    except asyncio.CancelledError:
        logger.warning("Main task cancelled; shutting down")
        raise
    except Exception as exc:
        logger.critical(f"Fatal startup error: {exc}", exc_info=True)
        sys.exit(1)
    finally:
        await _shutdown()


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, stop_event: asyncio.Event) -> None:
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            logger.debug(f"{sig.name} handler unsupported on this platform")


if __name__ == "__main__":
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    stop = asyncio.Event()
    _install_signal_handlers(loop, stop)

    try:
        loop.run_until_complete(main(stop))
    except KeyboardInterrupt:
        logger.info("Stopped via keyboard interrupt")
    finally:
        loop.close()
        shutdown_logging()
