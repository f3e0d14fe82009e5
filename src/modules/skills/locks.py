"""
Per-player mutual exclusion.

Reconcile, start, stop and gear changes for one player run under that
player's ``asyncio.Lock``; different players never contend.

A lock lives only while someone holds or waits for it. ``hold()`` counts
its users before awaiting the lock and evicts the entry when the last one
leaves, so the registry stays bounded by the players currently in flight
and a woken waiter can never be handed a different lock than a newcomer.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict


@dataclass
class _Entry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class PlayerLockRegistry:
    """Reference-counted lock per player id, valid for a single event loop."""

    def __init__(self) -> None:
        self._entries: Dict[str, _Entry] = {}

    @asynccontextmanager
    async def hold(self, player_id: str) -> AsyncIterator[None]:
        entry = self._entries.get(player_id)
        if entry is None:
            entry = self._entries[player_id] = _Entry()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._entries[player_id]

    def is_locked(self, player_id: str) -> bool:
        entry = self._entries.get(player_id)
        return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        return len(self._entries)
