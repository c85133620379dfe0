"""Unit tests for the public SDK module."""

from __future__ import annotations

import asyncio
from pathlib import Path

import localhistory


def test_sdk_exports_resolve() -> None:
    """Every exported name should exist on the module."""
    missing = [name for name in localhistory.__all__ if not hasattr(localhistory, name)]

    assert missing == []


def test_sdk_service_roundtrip(tmp_path: Path) -> None:
    """The SDK surface alone should be enough to capture and list history."""
    source_path = tmp_path / "note.md"
    source_path.write_text("# draft", encoding="utf-8")
    config = localhistory.HistoryConfig(
        data_root=tmp_path / "data",
        max_entries=None,
        max_file_size_kb=None,
        supported_schemes=("file",),
    )
    service = localhistory.WorkingCopyHistoryService(config)
    working_copy = localhistory.FileWorkingCopy(localhistory.Resource.file(source_path))

    async def _scenario() -> list[localhistory.HistoryEntry]:
        await service.add_entry(working_copy, localhistory.CancellationToken.NONE)
        return await service.get_entries(working_copy.resource)

    entries = asyncio.run(_scenario())

    assert [entry.location.suffix for entry in entries] == [".md"]
