"""Content store for captured snapshots.

This module persists immutable snapshot files and a per-resource index
of snapshot metadata under the configured history root. Each resource
owns one directory named by a digest of its URI.
"""

from __future__ import annotations

import asyncio
import shutil
from datetime import datetime, timezone
from pathlib import Path

from core.config import HistoryConfig
from core.constants import DEFAULT_ENTRY_SOURCE, INDEX_FILE_NAME
from core.errors import CorruptIndexError, HistoryResourceError, StorageWriteError
from core.logging_config import get_logger
from core.resource_uri import Resource
from core.types import HistoryEntry
from store.index_io import (
    build_entry_id,
    build_resource_key,
    entries_from_payload,
    entries_to_payload,
    next_sequence,
    read_index_file,
    write_bytes_atomic,
    write_index_file,
)
from store.resource_locks import ResourceLockMap
from store.retention import MaxEntriesRetention, RetentionPolicy

_LOGGER = get_logger(__name__)


class ContentStore:
    """Filesystem-backed snapshot store.

    This class owns resource directories, snapshot files and index
    updates. Index mutations for one resource are serialized; different
    resources proceed concurrently. Disk work runs in worker threads.
    """

    def __init__(self, config: HistoryConfig, retention: RetentionPolicy | None = None) -> None:
        """Initialize content store from config.

        Args:
            config: Runtime configuration.
            retention: Optional eviction policy; defaults to the configured entry limit.
        """
        self._history_root = config.history_root.expanduser().resolve()
        self._retention = retention or MaxEntriesRetention(config.max_entries)
        self._locks = ResourceLockMap()

    @property
    def history_root(self) -> Path:
        return self._history_root

    async def ensure_resource_directory(self, resource: Resource) -> Path:
        """Create the resource directory if absent.

        Args:
            resource: Resource identity.

        Returns:
            Resource directory path.

        Raises:
            StorageWriteError: If the directory cannot be created.
        """
        return await asyncio.to_thread(self._ensure_resource_directory, resource)

    async def write_snapshot(
        self,
        resource: Resource,
        content: bytes,
        source: str = DEFAULT_ENTRY_SOURCE,
        defer_retention: bool = False,
    ) -> HistoryEntry:
        """Persist a new immutable snapshot and link it into the index.

        Either both the snapshot file and its index row become visible or
        neither does.

        Args:
            resource: Resource identity.
            content: Snapshot bytes.
            source: Label describing why the snapshot was taken.
            defer_retention: Leave older entries in place until
                ``enforce_retention`` is called, so removing the new entry
                restores the previous history exactly.

        Returns:
            Persisted history entry.

        Raises:
            StorageWriteError: If any file or index write fails.
            CorruptIndexError: If the existing index cannot be parsed.
        """
        resource_dir = await self.ensure_resource_directory(resource)
        async with self._locks.hold(resource_dir.name):
            entry, evicted = await asyncio.to_thread(
                self._commit_snapshot, resource, resource_dir, content, source, defer_retention
            )
        _LOGGER.info(
            "history_snapshot_written",
            resource=str(resource),
            entry_id=entry.entry_id,
            size_bytes=len(content),
            evicted_count=len(evicted),
        )
        return entry

    async def read_index(self, resource: Resource) -> list[HistoryEntry]:
        """Load indexed entries for a resource, oldest-first.

        Rows whose snapshot file is missing are left out and logged. An
        unreadable index is logged and treated as empty.

        Args:
            resource: Resource identity.

        Returns:
            Ordered entries; empty when the resource was never captured.
        """
        return await asyncio.to_thread(self._read_index, resource)

    async def enforce_retention(self, resource: Resource) -> tuple[HistoryEntry, ...]:
        """Evict entries the retention policy no longer keeps.

        Args:
            resource: Resource identity.

        Returns:
            Evicted entries, oldest-first.

        Raises:
            StorageWriteError: If the index cannot be rewritten.
            CorruptIndexError: If the existing index cannot be parsed.
        """
        resource_dir = self._resource_dir(resource)
        async with self._locks.hold(resource_dir.name):
            evicted = await asyncio.to_thread(self._enforce_retention, resource, resource_dir)
        if evicted:
            _LOGGER.info(
                "history_retention_applied",
                resource=str(resource),
                evicted_count=len(evicted),
            )
        return evicted

    async def remove_snapshot(self, resource: Resource, entry_id: str) -> HistoryEntry | None:
        """Unlink one entry from the index and delete its file.

        Args:
            resource: Resource identity.
            entry_id: Entry to remove.

        Returns:
            The removed entry, or ``None`` when the id is not indexed.

        Raises:
            StorageWriteError: If the index cannot be rewritten.
            CorruptIndexError: If the existing index cannot be parsed.
        """
        resource_dir = self._resource_dir(resource)
        async with self._locks.hold(resource_dir.name):
            removed = await asyncio.to_thread(
                self._remove_snapshot, resource, resource_dir, entry_id
            )
        if removed is not None:
            _LOGGER.info("history_snapshot_removed", resource=str(resource), entry_id=entry_id)
        return removed

    async def list_resources(self) -> list[Resource]:
        """Return resources that have a readable index, sorted by URI."""
        return await asyncio.to_thread(self._list_resources)

    async def remove_all(self) -> int:
        """Delete every resource history directory.

        Returns:
            Number of resource directories removed.

        Raises:
            StorageWriteError: If a directory cannot be deleted.
        """
        removed_count = await asyncio.to_thread(self._remove_all)
        _LOGGER.info("history_store_cleared", removed_count=removed_count)
        return removed_count

    def _resource_dir(self, resource: Resource) -> Path:
        return self._history_root / build_resource_key(resource)

    def _ensure_resource_directory(self, resource: Resource) -> Path:
        resource_dir = self._resource_dir(resource)
        try:
            resource_dir.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise StorageWriteError(
                f"Failed to create history directory {resource_dir} for {resource}: {error}. "
                "Check permissions of the history root."
            ) from error
        return resource_dir

    def _commit_snapshot(
        self,
        resource: Resource,
        resource_dir: Path,
        content: bytes,
        source: str,
        defer_retention: bool,
    ) -> tuple[HistoryEntry, tuple[HistoryEntry, ...]]:
        index_path = resource_dir / INDEX_FILE_NAME
        entries = self._load_entries(resource, resource_dir)
        entry_id = build_entry_id(next_sequence(entries))
        entry = HistoryEntry(
            entry_id=entry_id,
            resource=resource,
            created_at=datetime.now(timezone.utc),
            source=source,
            location=resource_dir / f"{entry_id}{resource.suffix}",
        )
        try:
            write_bytes_atomic(entry.location, content)
        except OSError as error:
            raise StorageWriteError(
                f"Failed to write snapshot for {resource} at {entry.location}: {error}. "
                "Check free disk space and permissions of the history root."
            ) from error
        updated_entries = [*entries, entry]
        evicted = () if defer_retention else self._retention.select_evictions(updated_entries)
        kept_entries = _without(updated_entries, evicted)
        try:
            write_index_file(index_path, entries_to_payload(resource, kept_entries))
        except OSError as error:
            _discard_file(entry.location)
            raise StorageWriteError(
                f"Failed to update history index at {index_path}: {error}. "
                "The new snapshot was discarded; check free disk space and retry."
            ) from error
        for item in evicted:
            _discard_file(item.location)
        return entry, evicted

    def _enforce_retention(
        self,
        resource: Resource,
        resource_dir: Path,
    ) -> tuple[HistoryEntry, ...]:
        entries = self._load_entries(resource, resource_dir)
        evicted = self._retention.select_evictions(entries)
        if not evicted:
            return ()
        index_path = resource_dir / INDEX_FILE_NAME
        try:
            write_index_file(index_path, entries_to_payload(resource, _without(entries, evicted)))
        except OSError as error:
            raise StorageWriteError(
                f"Failed to update history index at {index_path}: {error}. "
                "Check free disk space and permissions of the history root."
            ) from error
        for item in evicted:
            _discard_file(item.location)
        return evicted

    def _remove_snapshot(
        self,
        resource: Resource,
        resource_dir: Path,
        entry_id: str,
    ) -> HistoryEntry | None:
        entries = self._load_entries(resource, resource_dir)
        removed = next((item for item in entries if item.entry_id == entry_id), None)
        if removed is None:
            return None
        kept_entries = [item for item in entries if item.entry_id != entry_id]
        index_path = resource_dir / INDEX_FILE_NAME
        try:
            write_index_file(index_path, entries_to_payload(resource, kept_entries))
        except OSError as error:
            raise StorageWriteError(
                f"Failed to update history index at {index_path}: {error}. "
                "Check permissions of the history root."
            ) from error
        _discard_file(removed.location)
        return removed

    def _load_entries(self, resource: Resource, resource_dir: Path) -> list[HistoryEntry]:
        index_path = resource_dir / INDEX_FILE_NAME
        payload = read_index_file(index_path)
        if payload is None:
            return []
        return entries_from_payload(payload, resource, resource_dir, index_path)

    def _read_index(self, resource: Resource) -> list[HistoryEntry]:
        resource_dir = self._resource_dir(resource)
        try:
            entries = self._load_entries(resource, resource_dir)
        except CorruptIndexError as error:
            _LOGGER.warning("history_index_unreadable", resource=str(resource), error=str(error))
            return []
        present: list[HistoryEntry] = []
        for entry in entries:
            if entry.location.is_file():
                present.append(entry)
                continue
            _LOGGER.warning(
                "history_index_entry_missing",
                resource=str(resource),
                entry_id=entry.entry_id,
                location=str(entry.location),
            )
        return present

    def _list_resources(self) -> list[Resource]:
        if not self._history_root.is_dir():
            return []
        resources: list[Resource] = []
        for resource_dir in sorted(self._history_root.iterdir()):
            if not resource_dir.is_dir():
                continue
            try:
                payload = read_index_file(resource_dir / INDEX_FILE_NAME)
                if payload is None:
                    continue
                resources.append(Resource.parse(str(payload.get("resource", ""))))
            except (CorruptIndexError, HistoryResourceError) as error:
                _LOGGER.warning(
                    "history_index_unreadable",
                    resource_dir=str(resource_dir),
                    error=str(error),
                )
        return sorted(resources, key=str)

    def _remove_all(self) -> int:
        if not self._history_root.is_dir():
            return 0
        removed_count = 0
        for resource_dir in self._history_root.iterdir():
            if not resource_dir.is_dir():
                continue
            try:
                shutil.rmtree(resource_dir)
            except OSError as error:
                raise StorageWriteError(
                    f"Failed to delete history directory {resource_dir}: {error}. "
                    "Check permissions of the history root."
                ) from error
            removed_count += 1
        return removed_count


def _without(
    entries: list[HistoryEntry], dropped: tuple[HistoryEntry, ...]
) -> list[HistoryEntry]:
    dropped_ids = {item.entry_id for item in dropped}
    return [item for item in entries if item.entry_id not in dropped_ids]


def _discard_file(file_path: Path) -> None:
    """Delete a snapshot file, logging instead of failing."""
    try:
        file_path.unlink(missing_ok=True)
    except OSError as error:
        _LOGGER.warning("history_snapshot_cleanup_failed", location=str(file_path), error=str(error))
