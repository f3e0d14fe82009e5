"""
Base class for domain services.

Services share three collaborators: the ``ConfigManager`` class for balance
values, the ``EventBus`` they publish to once their unit of work has
committed, and a logger. Transactions are not handled here; each service
opens units of work on its store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from src.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from logging import Logger

    from src.core.config.manager import ConfigManager
    from src.core.event.bus import EventBus


class BaseService:
    def __init__(
        self,
        config_manager: type[ConfigManager],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config_manager
        self._events = event_bus
        self.log = logger

    def get_config(self, key: str, default: Optional[Any] = None, required: bool = False) -> Any:
        """
        Read a balance value.

        Raises:
            ConfigurationError: ``required`` is set and the key resolves to None
        """
        value = self._config.get(key, default)
        if required and value is None:
            raise ConfigurationError(key, "required key is missing")
        return value

    async def emit_event(self, event_type: str, data: Dict[str, Any]) -> None:
        await self._events.publish(event_type, data)

    def log_operation(self, operation: str, **context: Any) -> None:
        self.log.info(operation, extra={"service_operation": operation, **context})

    def log_error(self, operation: str, error: Exception, **context: Any) -> None:
        self.log.error(
            f"{operation} failed: {error}",
            extra={
                "service_operation": operation,
                "error_type": type(error).__name__,
                **context,
            },
        )
