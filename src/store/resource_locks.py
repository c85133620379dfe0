"""Per-resource mutual exclusion for index updates."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator


@dataclass
class _LockSlot:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class ResourceLockMap:
    """Lazily created asyncio locks keyed by resource key.

    A slot is dropped as soon as no task holds or waits on it, so the map
    only grows with the number of resources being written concurrently.
    """

    def __init__(self) -> None:
        self._slots: dict[str, _LockSlot] = {}

    @property
    def active_keys(self) -> tuple[str, ...]:
        return tuple(self._slots)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Serialize the enclosed block with other holders of ``key``."""
        slot = self._slots.get(key)
        if slot is None:
            slot = _LockSlot()
            self._slots[key] = slot
        slot.holders += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.holders -= 1
            if slot.holders == 0 and self._slots.get(key) is slot:
                del self._slots[key]
