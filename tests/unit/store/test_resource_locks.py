"""Unit tests for per-resource lock map."""

from __future__ import annotations

import asyncio

from store.resource_locks import ResourceLockMap


def test_same_key_holders_are_serialized() -> None:
    """Only one holder of a key should run at a time."""
    locks = ResourceLockMap()
    active = 0
    peak = 0

    async def _hold(key: str) -> None:
        nonlocal active, peak
        async with locks.hold(key):
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0)
            active -= 1

    async def _scenario() -> None:
        await asyncio.gather(*(_hold("same") for _ in range(5)))

    asyncio.run(_scenario())

    assert (peak, locks.active_keys) == (1, ())


def test_different_keys_run_concurrently() -> None:
    """Holders of different keys should not wait on each other."""
    locks = ResourceLockMap()
    entered: list[str] = []

    async def _scenario() -> list[str]:
        gate = asyncio.Event()

        async def _hold(key: str) -> None:
            async with locks.hold(key):
                entered.append(key)
                await gate.wait()

        tasks = [asyncio.create_task(_hold(key)) for key in ("a", "b")]
        while len(entered) < 2:
            await asyncio.sleep(0)
        keys = sorted(locks.active_keys)
        gate.set()
        await asyncio.gather(*tasks)
        return keys

    keys = asyncio.run(_scenario())

    assert (keys, locks.active_keys) == (["a", "b"], ())
