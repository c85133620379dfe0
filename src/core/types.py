"""Shared typed models.

This module defines immutable data models used by the content store,
the history service and the CLI to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol

from core.resource_uri import Resource


class WorkingCopy(Protocol):
    """Live representation of a resource's editable content.

    The owning application controls its lifecycle; history code only
    reads ``resource`` and ``name`` and never mutates it.
    """

    @property
    def resource(self) -> Resource: ...

    @property
    def name(self) -> str: ...


@dataclass(frozen=True)
class FileWorkingCopy:
    """Working copy backed by a resource whose bytes live in its store.

    Attributes:
        resource: Resource identity of the working copy.
    """

    resource: Resource

    @property
    def name(self) -> str:
        return self.resource.basename


@dataclass(frozen=True)
class HistoryEntry:
    """One captured, immutable snapshot of a resource.

    Attributes:
        entry_id: Identifier unique per resource, ordered by creation.
        resource: Resource the snapshot was captured from.
        created_at: UTC creation timestamp.
        source: Short label describing why the snapshot was taken.
        location: Absolute path of the stored snapshot bytes.
    """

    entry_id: str
    resource: Resource
    created_at: datetime
    source: str
    location: Path


@dataclass(frozen=True)
class HistoryEvent:
    """Notification payload for an added or removed entry."""

    entry: HistoryEntry

    @property
    def resource(self) -> Resource:
        return self.entry.resource


@dataclass(frozen=True)
class HistoryRemoveAllEvent:
    """Notification payload after all history was removed.

    Attributes:
        resource_count: Number of per-resource histories deleted.
    """

    resource_count: int
