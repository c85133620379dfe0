"""Unit tests for retention policies."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from core.resource_uri import Resource
from core.types import HistoryEntry
from store.retention import MaxEntriesRetention


def _entries(count: int) -> list[HistoryEntry]:
    resource = Resource(scheme="file", path="/work/foo.txt")
    return [
        HistoryEntry(
            entry_id=f"{index:06d}-abcdef",
            resource=resource,
            created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
            source="File Saved",
            location=Path(f"/history/{index:06d}-abcdef.txt"),
        )
        for index in range(1, count + 1)
    ]


def test_max_entries_evicts_oldest_first() -> None:
    """Only the oldest surplus entries should be evicted."""
    entries = _entries(5)

    evicted = MaxEntriesRetention(limit=3).select_evictions(entries)

    assert [entry.entry_id for entry in evicted] == ["000001-abcdef", "000002-abcdef"]


def test_max_entries_within_limit_evicts_nothing() -> None:
    assert MaxEntriesRetention(limit=3).select_evictions(_entries(3)) == ()


def test_unlimited_retention_keeps_everything() -> None:
    assert MaxEntriesRetention(limit=None).select_evictions(_entries(100)) == ()
