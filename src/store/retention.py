"""Retention policies applied when a snapshot is appended."""

from __future__ import annotations

from typing import Protocol, Sequence

from core.types import HistoryEntry


class RetentionPolicy(Protocol):
    """Chooses which entries to evict from an oldest-first sequence."""

    def select_evictions(self, entries: Sequence[HistoryEntry]) -> tuple[HistoryEntry, ...]: ...


class MaxEntriesRetention:
    """Keep only the newest ``limit`` entries; ``None`` keeps everything."""

    def __init__(self, limit: int | None) -> None:
        self._limit = limit

    @property
    def limit(self) -> int | None:
        return self._limit

    def select_evictions(self, entries: Sequence[HistoryEntry]) -> tuple[HistoryEntry, ...]:
        if self._limit is None or len(entries) <= self._limit:
            return ()
        return tuple(entries[: len(entries) - self._limit])
