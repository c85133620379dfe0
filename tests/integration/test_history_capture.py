"""Integration test for capturing and listing history of two files."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from pathlib import Path

from core.cancellation import CancellationToken, CancellationTokenSource
from core.config import HistoryConfig
from core.resource_uri import Resource
from core.types import FileWorkingCopy, HistoryEvent
from history.history_service import WorkingCopyHistoryService


def _service(tmp_path: Path) -> WorkingCopyHistoryService:
    config = replace(
        HistoryConfig.from_env(),
        data_root=tmp_path / "User",
        max_entries=50,
        supported_schemes=("file",),
    )
    return WorkingCopyHistoryService(config)


def test_add_entry_flow_with_cancellation_and_ineligible_resource(
    tmp_path: Path, sample_files
) -> None:
    """Captures, cancellation and unsupported schemes should line up with events."""
    foo_path, bar_path = sample_files
    service = _service(tmp_path)
    events: list[HistoryEvent] = []
    service.on_did_add_entry(events.append)
    working_copy1 = FileWorkingCopy(Resource.file(foo_path))
    working_copy2 = FileWorkingCopy(Resource.file(bar_path))
    working_copy3 = FileWorkingCopy(Resource.file(bar_path).with_scheme("unsupported"))

    async def _scenario() -> dict[str, object]:
        entry1a = await service.add_entry(working_copy1, CancellationToken.NONE)
        entry2a = await service.add_entry(working_copy2, CancellationToken.NONE)
        first_round = len(events)
        entry1b = await service.add_entry(working_copy1, CancellationToken.NONE)
        entry2b = await service.add_entry(working_copy2, CancellationToken.NONE)
        second_round = len(events)
        source = CancellationTokenSource()
        pending = asyncio.ensure_future(service.add_entry(working_copy1, source.token))
        source.dispose(cancel=True)
        entry1c = await pending
        entry3a = await service.add_entry(working_copy3, CancellationToken.NONE)
        return {
            "entries": (entry1a, entry2a, entry1b, entry2b),
            "rounds": (first_round, second_round),
            "cancelled": entry1c,
            "ineligible": entry3a,
            "lengths": (
                len(await service.get_entries(working_copy1.resource)),
                len(await service.get_entries(working_copy2.resource)),
            ),
        }

    result = asyncio.run(_scenario())
    entry1a, entry2a, entry1b, entry2b = result["entries"]  # type: ignore[misc]

    assert [entry.location.read_bytes() for entry in (entry1a, entry1b)] == [b"Hello Foo"] * 2
    assert [entry.location.read_bytes() for entry in (entry2a, entry2b)] == [
        bar_path.read_bytes()
    ] * 2
    assert [str(event.resource) for event in events] == [
        str(working_copy1.resource),
        str(working_copy2.resource),
    ] * 2
    assert result["rounds"] == (2, 4)
    assert (result["cancelled"], result["ineligible"], result["lengths"]) == (None, None, (2, 2))


def test_get_entries_counts_follow_captures(tmp_path: Path, sample_files) -> None:
    """Entry counts should grow by one per capture and stay per resource."""
    foo_path, bar_path = sample_files
    service = _service(tmp_path)
    working_copy1 = FileWorkingCopy(Resource.file(foo_path))
    working_copy2 = FileWorkingCopy(Resource.file(bar_path))

    async def _scenario() -> list[int]:
        counts = [len(await service.get_entries(working_copy1.resource))]
        await service.add_entry(working_copy1)
        counts.append(len(await service.get_entries(working_copy1.resource)))
        await service.add_entry(working_copy1)
        counts.append(len(await service.get_entries(working_copy1.resource)))
        counts.append(len(await service.get_entries(working_copy2.resource)))
        await service.add_entry(working_copy2)
        counts.append(len(await service.get_entries(working_copy2.resource)))
        return counts

    counts = asyncio.run(_scenario())
    service.dispose()

    assert counts == [0, 1, 2, 0, 1]
