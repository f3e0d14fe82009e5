"""
EventBus: async pub/sub with tiered listener concurrency.

Responsibilities
----------------
- Register/unregister listeners with priorities
- Publish events to all matching listeners (exact + wildcard)
- Execute listeners according to the tiered concurrency model:
  * CRITICAL: sequential, ordered, awaited with timeout
  * HIGH: sequential, ordered, awaited with timeout
  * NORMAL: concurrent (gather), awaited
  * LOW: fire-and-forget background tasks
- Error isolation: one failing listener never blocks others

Wildcard Patterns
-----------------
- "*" matches any event
- "skill.*" matches "skill.leveled_up", "skill.training_started", ...
- "*.changed" matches "equipment.changed"

Services publish only after their transaction commits, so listeners never
observe state that could still roll back.
"""

from __future__ import annotations

import asyncio
import inspect
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Optional

from src.core.config.manager import ConfigManager
from src.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)
from src.core.logging.logger import get_logger, set_log_context

logger = get_logger(__name__)


@dataclass
class EventMetrics:
    publishes: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    errors: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    listener_count: int = 0

    def snapshot(self) -> dict[str, Any]:
        return {
            "publishes": dict(self.publishes),
            "errors": dict(self.errors),
            "listener_count": self.listener_count,
        }


def matches(event_name: str, pattern: str) -> bool:
    """
    Check if an event name matches a wildcard pattern.

    >>> matches("skill.leveled_up", "skill.*")
    True
    >>> matches("skill.leveled_up", "player.*")
    False
    """
    if pattern == "*":
        return True
    if "*" not in pattern:
        return event_name == pattern

    while "**" in pattern:
        pattern = pattern.replace("**", "*")

    parts = pattern.split("*")
    if parts[0] and not event_name.startswith(parts[0]):
        return False
    if parts[-1] and not event_name.endswith(parts[-1]):
        return False

    idx = len(parts[0])
    for mid in parts[1:-1]:
        if not mid:
            continue
        next_idx = event_name.find(mid, idx)
        if next_idx == -1:
            return False
        idx = next_idx + len(mid)

    return len(event_name) - len(parts[-1]) >= idx


class EventBus:
    """
    Async EventBus with tiered concurrency.

    Designed for single-threaded asyncio usage; all methods must be called
    from the same event loop.

    Examples
    --------
    >>> bus = EventBus()
    >>> bus.subscribe("skill.leveled_up", on_level_up, priority=ListenerPriority.HIGH)
    >>> await bus.publish("skill.leveled_up", {"player_id": "p1", "new_level": 10})
    """

    def __init__(
        self,
        config_manager: Optional[type[ConfigManager]] = None,
        *,
        critical_timeout_seconds: Optional[float] = None,
        high_timeout_seconds: Optional[float] = None,
    ) -> None:
        self._config_manager = config_manager
        self._listeners: dict[str, list[EventListener]] = defaultdict(list)
        self._background_tasks: set[asyncio.Task[Any]] = set()
        self._metrics = EventMetrics()

        self._critical_timeout = self._load_timeout(
            key="core.event.listener_timeout.critical_seconds",
            override=critical_timeout_seconds,
            default=5.0,
        )
        self._high_timeout = self._load_timeout(
            key="core.event.listener_timeout.high_seconds",
            override=high_timeout_seconds,
            default=5.0,
        )

        logger.debug(
            "EventBus initialized",
            extra={
                "critical_timeout_seconds": self._critical_timeout,
                "high_timeout_seconds": self._high_timeout,
            },
        )

    def _load_timeout(self, key: str, override: Optional[float], default: float) -> float:
        """Resolve a timeout: override, then config, then default."""
        if override is not None:
            return float(override)
        if self._config_manager is None:
            return float(default)
        return float(self._config_manager.get(key, default))

    # ------------------------------------------------------------------ #
    # Subscription API
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate_callback_signature(callback: CallbackType) -> None:
        try:
            sig = inspect.signature(callback)
        except (TypeError, ValueError):
            # Built-ins may not expose a signature; trust the caller.
            return

        params = list(sig.parameters.values())
        if len(params) != 1:
            callback_name = getattr(callback, "__qualname__", repr(callback))
            raise ValueError(
                f"Event listener must accept exactly 1 parameter (EventPayload), "
                f"got {len(params)} parameters for '{callback_name}'"
            )

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        *,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
    ) -> str:
        """
        Subscribe a callback to an event name or wildcard pattern.

        Returns
        -------
        str:
            The listener identifier (for unsubscribing later). Subscribing the
            same identifier twice to one pattern is a no-op.

        Raises
        ------
        ValueError:
            If the callback does not take exactly one parameter.
        """
        self._validate_callback_signature(callback)

        listener = EventListener.from_callback(
            event_name=event_name,
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )

        bucket = self._listeners[event_name]
        if any(existing.identifier == listener.identifier for existing in bucket):
            logger.warning(
                "EventBus: duplicate listener prevented",
                extra={"event_name": event_name, "listener_id": listener.identifier},
            )
            return listener.identifier

        bucket.append(listener)
        self._metrics.listener_count += 1

        logger.debug(
            "EventBus: subscribed listener",
            extra={
                "event_name": event_name,
                "listener_id": listener.identifier,
                "priority": listener.priority.name,
                "once": listener.once,
            },
        )
        return listener.identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        bucket = self._listeners.get(event_name, [])
        remaining = [lst for lst in bucket if lst.identifier != identifier]
        removed = len(remaining) != len(bucket)

        if removed:
            self._listeners[event_name] = remaining
            self._metrics.listener_count -= 1
            logger.debug(
                "EventBus: unsubscribed listener",
                extra={"event_name": event_name, "listener_id": identifier},
            )
        return removed

    def clear(self) -> None:
        """Remove all listeners. Intended for tests or full reinit."""
        self._listeners.clear()
        self._metrics.listener_count = 0

    def _extract_listeners(self, event_name: str) -> list[EventListener]:
        """Collect matching listeners sorted by priority, pruning one-shot ones."""
        matched: list[EventListener] = []
        for pattern, bucket in self._listeners.items():
            if not matches(event_name, pattern):
                continue
            matched.extend(bucket)
            if any(lst.once for lst in bucket):
                self._listeners[pattern] = [lst for lst in bucket if not lst.once]
                self._metrics.listener_count -= sum(1 for lst in bucket if lst.once)

        return sorted(matched, key=lambda lst: lst.priority.value)

    # ------------------------------------------------------------------ #
    # Publish API
    # ------------------------------------------------------------------ #

    async def publish(self, event_name: str, data: EventPayload) -> list[Any]:
        """
        Publish an event to all subscribed listeners.

        Returns
        -------
        list[Any]:
            Results from CRITICAL/HIGH/NORMAL listeners. LOW listeners are
            fire-and-forget and not included.
        """
        self._metrics.publishes[event_name] += 1
        set_log_context(event_name=event_name)

        listeners = self._extract_listeners(event_name)
        if not listeners:
            logger.debug("EventBus: no listeners for event", extra={"event_name": event_name})
            return []

        results: list[Any] = []

        for listener in listeners:
            if listener.priority is ListenerPriority.CRITICAL:
                results.append(
                    await self._run_with_timeout(listener, event_name, data, self._critical_timeout)
                )
        for listener in listeners:
            if listener.priority is ListenerPriority.HIGH:
                results.append(
                    await self._run_with_timeout(listener, event_name, data, self._high_timeout)
                )

        normal = [lst for lst in listeners if lst.priority is ListenerPriority.NORMAL]
        if normal:
            results.extend(
                await asyncio.gather(
                    *(self._run_listener(lst, event_name, data) for lst in normal)
                )
            )

        for listener in listeners:
            if listener.priority is ListenerPriority.LOW:
                task = asyncio.get_running_loop().create_task(
                    self._run_listener(listener, event_name, data),
                    name=f"eventbus-low-{event_name}-{listener.identifier}",
                )
                self._background_tasks.add(task)
                task.add_done_callback(self._background_tasks.discard)

        return results

    async def _run_with_timeout(
        self,
        listener: EventListener,
        event_name: str,
        payload: EventPayload,
        timeout: Optional[float],
    ) -> Any:
        if timeout is None or timeout <= 0:
            return await self._run_listener(listener, event_name, payload)

        try:
            return await asyncio.wait_for(
                self._run_listener(listener, event_name, payload),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            self._record_error(event_name, listener, exc)
            return None

    async def _run_listener(
        self,
        listener: EventListener,
        event_name: str,
        payload: EventPayload,
    ) -> Any:
        """Run one listener; errors are logged and counted, never propagated."""
        try:
            result = listener.callback(payload)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as exc:
            self._record_error(event_name, listener, exc)
            return None

    def _record_error(self, event_name: str, listener: EventListener, exc: BaseException) -> None:
        self._metrics.errors[event_name] += 1
        logger.error(
            "EventBus listener error",
            extra={
                "event_name": event_name,
                "listener_id": listener.identifier,
                "priority": listener.priority.name,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
            exc_info=exc,
        )

    # ------------------------------------------------------------------ #
    # Introspection / Lifecycle
    # ------------------------------------------------------------------ #

    def get_metrics(self) -> dict[str, Any]:
        return self._metrics.snapshot()

    def get_background_task_count(self) -> int:
        return len(self._background_tasks)

    async def drain(self) -> None:
        """Wait for in-flight LOW-tier listeners to finish."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        await self.drain()
        self.clear()
