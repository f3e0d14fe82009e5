"""
Event bus types.

Listener tiers run in this order on every publish:

- CRITICAL (0) and HIGH (10): one at a time, each bounded by a timeout
- NORMAL (50): together via ``asyncio.gather``
- LOW (100): scheduled as background tasks; ``EventBus.drain()`` awaits them
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

EventPayload = dict[str, Any]

CallbackType = Union[
    Callable[[EventPayload], Any],
    Callable[[EventPayload], Awaitable[Any]],
]


class ListenerPriority(Enum):
    CRITICAL = 0
    HIGH = 10
    NORMAL = 50
    LOW = 100


@dataclass(slots=True, frozen=True)
class EventListener:
    """A subscription; ``once`` listeners are dropped before their first call."""

    callback: CallbackType
    priority: ListenerPriority
    identifier: str
    once: bool = False

    @classmethod
    def from_callback(
        cls,
        event_name: str,
        callback: CallbackType,
        priority: ListenerPriority,
        identifier: Optional[str],
        once: bool,
    ) -> EventListener:
        if identifier is None:
            name = getattr(callback, "__qualname__", None) or getattr(callback, "__name__", "callback")
            identifier = f"{getattr(callback, '__module__', 'unknown')}.{name}@{event_name}"
        return cls(callback=callback, priority=priority, identifier=identifier, once=once)
