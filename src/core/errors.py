"""Local history exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
Ineligible resources and cancelled operations are not errors and
never surface through this hierarchy.
"""

from __future__ import annotations


class HistoryError(Exception):
    """Base exception for all local history failures."""


class HistoryConfigError(HistoryError):
    """Raised for invalid runtime configuration."""


class HistoryReadError(HistoryError):
    """Raised when resource content cannot be read."""


class HistoryStoreError(HistoryError):
    """Raised for content store and index failures."""


class StorageWriteError(HistoryStoreError):
    """Raised when a snapshot, directory or index cannot be persisted."""


class CorruptIndexError(HistoryStoreError):
    """Raised when a history index cannot be parsed for an update."""


class HistoryResourceError(HistoryError):
    """Raised for malformed resource identifiers."""
