"""Public SDK surface for local history.

This module provides a stable import path for library users.
It re-exports the history service, its collaborators and typed models.
"""

from __future__ import annotations

from core.cancellation import CancellationToken, CancellationTokenSource
from core.config import HistoryConfig
from core.errors import (
    CorruptIndexError,
    HistoryError,
    HistoryReadError,
    StorageWriteError,
)
from core.events import Disposable
from core.resource_uri import Resource
from core.types import (
    FileWorkingCopy,
    HistoryEntry,
    HistoryEvent,
    HistoryRemoveAllEvent,
    WorkingCopy,
)
from history.capabilities import DiskContentReader, SchemeEligibility
from history.history_service import WorkingCopyHistoryService
from store.content_store import ContentStore
from store.retention import MaxEntriesRetention, RetentionPolicy

__all__ = [
    "CancellationToken",
    "CancellationTokenSource",
    "ContentStore",
    "CorruptIndexError",
    "DiskContentReader",
    "Disposable",
    "FileWorkingCopy",
    "HistoryConfig",
    "HistoryEntry",
    "HistoryError",
    "HistoryEvent",
    "HistoryReadError",
    "HistoryRemoveAllEvent",
    "MaxEntriesRetention",
    "Resource",
    "RetentionPolicy",
    "SchemeEligibility",
    "StorageWriteError",
    "WorkingCopy",
    "WorkingCopyHistoryService",
]
