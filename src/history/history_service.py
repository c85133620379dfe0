"""Working copy history service.

This module is the public contract for capturing and listing local
history. It filters ineligible resources, honors cooperative
cancellation, drives the content store and emits change events that
match what was actually persisted.

Per ``add_entry`` call the flow is::

    Started -> EligibilityChecked -> {Ineligible -> Absent}
            -> BytesRead -> {Cancelled -> Absent}
            -> Persisted -> {WriteFailed -> Error}
            -> EventEmitted -> Returned(entry)

A cancellation observed after the snapshot was committed rolls the
snapshot back, so a cancelled call leaves neither an event nor an entry.
Retention runs only once the capture is final, so a rollback never
costs an older entry.
"""

from __future__ import annotations

from typing import Callable

from core.cancellation import CancellationToken
from core.config import HistoryConfig
from core.constants import DEFAULT_ENTRY_SOURCE
from core.errors import HistoryStoreError
from core.events import Disposable, Emitter
from core.logging_config import get_logger
from core.resource_uri import Resource
from core.types import HistoryEntry, HistoryEvent, HistoryRemoveAllEvent, WorkingCopy
from history.capabilities import (
    ContentReader,
    DiskContentReader,
    EligibilityCheck,
    SchemeEligibility,
)
from store.content_store import ContentStore

_LOGGER = get_logger(__name__)


class WorkingCopyHistoryService:
    """Captures and lists snapshots of working copies."""

    def __init__(
        self,
        config: HistoryConfig | None = None,
        reader: ContentReader | None = None,
        eligibility: EligibilityCheck | None = None,
        store: ContentStore | None = None,
    ) -> None:
        """Create a history service bound to one history root.

        Args:
            config: Optional runtime configuration; read from env when omitted.
            reader: Optional content reader; local disk by default.
            eligibility: Optional eligibility check; configured schemes by default.
            store: Optional content store; built from config by default.
        """
        self._config = config or HistoryConfig.from_env()
        self._reader = reader or DiskContentReader()
        self._eligibility = eligibility or SchemeEligibility(self._config.supported_schemes)
        self._store = store or ContentStore(self._config)
        self._did_add_entry: Emitter[HistoryEvent] = Emitter("did_add_entry")
        self._did_remove_entry: Emitter[HistoryEvent] = Emitter("did_remove_entry")
        self._did_remove_entries: Emitter[HistoryRemoveAllEvent] = Emitter("did_remove_entries")

    @property
    def config(self) -> HistoryConfig:
        return self._config

    def on_did_add_entry(self, listener: Callable[[HistoryEvent], None]) -> Disposable:
        """Subscribe to committed, non-cancelled captures."""
        return self._did_add_entry.subscribe(listener)

    def on_did_remove_entry(self, listener: Callable[[HistoryEvent], None]) -> Disposable:
        """Subscribe to explicit single-entry removals."""
        return self._did_remove_entry.subscribe(listener)

    def on_did_remove_entries(
        self, listener: Callable[[HistoryRemoveAllEvent], None]
    ) -> Disposable:
        """Subscribe to removal of all history."""
        return self._did_remove_entries.subscribe(listener)

    async def add_entry(
        self,
        working_copy: WorkingCopy,
        token: CancellationToken = CancellationToken.NONE,
        source: str = DEFAULT_ENTRY_SOURCE,
    ) -> HistoryEntry | None:
        """Capture the current content of a working copy.

        Args:
            working_copy: Working copy to snapshot.
            token: Cooperative cancellation signal.
            source: Label describing why the snapshot is taken.

        Returns:
            The committed entry, or ``None`` when the resource is ineligible
            or the call was cancelled.

        Raises:
            HistoryReadError: If the content cannot be read.
            StorageWriteError: If the snapshot cannot be persisted.
            CorruptIndexError: If the existing index cannot be parsed.
        """
        resource = working_copy.resource
        if token.is_cancellation_requested:
            _log_skipped(resource, "cancelled")
            return None
        if not self._eligibility.can_handle(resource):
            _log_skipped(resource, "unsupported_scheme")
            return None

        content = await self._reader.read_bytes(resource)
        if token.is_cancellation_requested:
            _log_skipped(resource, "cancelled")
            return None
        max_bytes = self._config.max_file_size_bytes
        if max_bytes is not None and len(content) > max_bytes:
            _log_skipped(resource, "too_large", size_bytes=len(content), max_bytes=max_bytes)
            return None

        entry = await self._store.write_snapshot(resource, content, source, defer_retention=True)
        if token.is_cancellation_requested:
            await self._roll_back(entry)
            _log_skipped(resource, "cancelled_after_write", entry_id=entry.entry_id)
            return None

        await self._enforce_retention(resource)
        self._did_add_entry.fire(HistoryEvent(entry=entry))
        _LOGGER.info(
            "history_entry_added",
            resource=str(resource),
            entry_id=entry.entry_id,
            source=source,
        )
        return entry

    async def get_entries(
        self,
        resource: Resource,
        token: CancellationToken = CancellationToken.NONE,
    ) -> list[HistoryEntry]:
        """List captured entries of a resource, oldest-first.

        Args:
            resource: Resource identity.
            token: Cooperative cancellation signal.

        Returns:
            Ordered entries; empty when none exist or the call was cancelled.
        """
        if token.is_cancellation_requested:
            return []
        entries = await self._store.read_index(resource)
        if token.is_cancellation_requested:
            return []
        return entries

    async def remove_entry(
        self,
        entry: HistoryEntry,
        token: CancellationToken = CancellationToken.NONE,
    ) -> bool:
        """Remove one entry and its stored snapshot.

        Returns:
            ``True`` when the entry existed and was removed.
        """
        if token.is_cancellation_requested:
            return False
        removed = await self._store.remove_snapshot(entry.resource, entry.entry_id)
        if removed is None:
            return False
        self._did_remove_entry.fire(HistoryEvent(entry=removed))
        return True

    async def get_all(
        self,
        token: CancellationToken = CancellationToken.NONE,
    ) -> list[Resource]:
        """List every resource that has history."""
        if token.is_cancellation_requested:
            return []
        resources = await self._store.list_resources()
        if token.is_cancellation_requested:
            return []
        return resources

    async def remove_all(
        self,
        token: CancellationToken = CancellationToken.NONE,
    ) -> int:
        """Remove the history of every resource.

        Returns:
            Number of resource histories removed.
        """
        if token.is_cancellation_requested:
            return 0
        removed_count = await self._store.remove_all()
        self._did_remove_entries.fire(HistoryRemoveAllEvent(resource_count=removed_count))
        return removed_count

    def dispose(self) -> None:
        """Drop all event subscriptions."""
        self._did_add_entry.dispose()
        self._did_remove_entry.dispose()
        self._did_remove_entries.dispose()

    async def _roll_back(self, entry: HistoryEntry) -> None:
        """Unlink a late-cancelled capture; failures are logged, not raised."""
        try:
            await self._store.remove_snapshot(entry.resource, entry.entry_id)
        except HistoryStoreError as error:
            _LOGGER.warning(
                "history_rollback_failed",
                resource=str(entry.resource),
                entry_id=entry.entry_id,
                error=str(error),
            )

    async def _enforce_retention(self, resource: Resource) -> None:
        """Apply retention once a capture is final, logging failures."""
        try:
            await self._store.enforce_retention(resource)
        except HistoryStoreError as error:
            _LOGGER.warning("history_retention_failed", resource=str(resource), error=str(error))


def _log_skipped(resource: Resource, reason: str, **fields: object) -> None:
    _LOGGER.debug("history_entry_skipped", resource=str(resource), reason=reason, **fields)
