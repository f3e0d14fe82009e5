"""
Event system.

In-process pub/sub used by services to announce committed state changes.
"""

from src.core.event.bus import EventBus, matches
from src.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)

__all__ = [
    "EventBus",
    "matches",
    "EventListener",
    "EventPayload",
    "CallbackType",
    "ListenerPriority",
]
