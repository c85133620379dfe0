"""History index persistence helpers.

This module isolates JSON index IO, storage key derivation and entry id
generation. It keeps content store orchestration focused on business flow.
All writes go through a temporary file and ``os.replace`` so readers only
ever observe a complete file.
"""

from __future__ import annotations

import hashlib
import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence, cast
from uuid import uuid4

from core.constants import (
    ENTRY_SEQUENCE_WIDTH,
    ENTRY_SUFFIX_LENGTH,
    HASH_ALGORITHM,
    INDEX_FORMAT_VERSION,
    RESOURCE_KEY_DIGEST_LENGTH,
    TEMP_FILE_SUFFIX,
)
from core.errors import CorruptIndexError
from core.resource_uri import Resource
from core.types import HistoryEntry


def build_resource_key(resource: Resource) -> str:
    """Derive the storage directory name for a resource.

    Args:
        resource: Resource identity.

    Returns:
        Hex digest prefix of the normalized resource URI.
    """
    digest = hashlib.new(HASH_ALGORITHM, str(resource).encode("utf-8")).hexdigest()
    return digest[:RESOURCE_KEY_DIGEST_LENGTH]


def build_entry_id(sequence: int) -> str:
    """Build an entry id that sorts by creation order.

    Args:
        sequence: One-based sequence number within the resource.

    Returns:
        Entry id string.
    """
    return f"{sequence:0{ENTRY_SEQUENCE_WIDTH}d}-{uuid4().hex[:ENTRY_SUFFIX_LENGTH]}"


def next_sequence(entries: Sequence[HistoryEntry]) -> int:
    """Return the sequence number following the newest indexed entry."""
    sequences = [_parse_sequence(entry.entry_id) for entry in entries]
    return max((value for value in sequences if value is not None), default=0) + 1


def new_index_payload(resource: Resource) -> dict[str, Any]:
    """Return an empty index payload for a resource."""
    return {"version": INDEX_FORMAT_VERSION, "resource": str(resource), "entries": []}


def read_index_file(index_path: Path) -> dict[str, Any] | None:
    """Read and validate a resource index payload.

    Args:
        index_path: Index JSON path.

    Returns:
        Parsed index object, or ``None`` when no index exists.

    Raises:
        CorruptIndexError: If the index is unreadable or malformed.
    """
    try:
        raw_text = index_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as error:
        raise CorruptIndexError(
            f"Failed to read history index at {index_path}: {error}. "
            "Check file permissions for the history directory."
        ) from error
    try:
        payload = json.loads(raw_text)
    except json.JSONDecodeError as error:
        raise CorruptIndexError(
            f"Failed to parse history index at {index_path}: {error.msg}. "
            "Remove the resource history directory to reset it."
        ) from error
    if not isinstance(payload, dict) or not isinstance(payload.get("entries"), list):
        raise CorruptIndexError(
            f"Failed to parse history index at {index_path}: "
            "expected JSON object with an entries list. Remove the resource history directory."
        )
    return payload


def write_index_file(index_path: Path, payload: dict[str, Any]) -> None:
    """Atomically replace the index file.

    Raises:
        OSError: If the temporary file cannot be written or moved.
    """
    body = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    write_bytes_atomic(index_path, body.encode("utf-8"))


def write_bytes_atomic(target_path: Path, content: bytes) -> None:
    """Write bytes through a sibling temporary file and rename into place.

    Raises:
        OSError: If writing or renaming fails; the temporary file is removed.
    """
    temp_path = target_path.with_name(target_path.name + TEMP_FILE_SUFFIX)
    try:
        with temp_path.open("wb") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, target_path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


def entries_from_payload(
    payload: dict[str, Any],
    resource: Resource,
    resource_dir: Path,
    index_path: Path,
) -> list[HistoryEntry]:
    """Deserialize index rows into typed entries, oldest-first.

    Raises:
        CorruptIndexError: If a row is missing required fields.
    """
    rows = cast(list[Any], payload["entries"])
    return [_entry_from_row(row, resource, resource_dir, index_path) for row in rows]


def entries_to_payload(resource: Resource, entries: Sequence[HistoryEntry]) -> dict[str, Any]:
    """Serialize typed entries into an index payload."""
    payload = new_index_payload(resource)
    payload["entries"] = [
        {
            "id": entry.entry_id,
            "file": entry.location.name,
            "timestamp": entry.created_at.isoformat(),
            "source": entry.source,
        }
        for entry in entries
    ]
    return payload


def _entry_from_row(
    row: Any,
    resource: Resource,
    resource_dir: Path,
    index_path: Path,
) -> HistoryEntry:
    if not isinstance(row, dict):
        raise CorruptIndexError(f"Invalid history index row at {index_path}: expected object.")
    try:
        return HistoryEntry(
            entry_id=str(row["id"]),
            resource=resource,
            created_at=datetime.fromisoformat(str(row["timestamp"])),
            source=str(row.get("source", "")),
            location=resource_dir / str(row["file"]),
        )
    except KeyError as error:
        raise CorruptIndexError(
            f"Invalid history index row at {index_path}: missing field {error.args[0]!r}."
        ) from error
    except ValueError as error:
        raise CorruptIndexError(
            f"Invalid history index row at {index_path}: {error}."
        ) from error


def _parse_sequence(entry_id: str) -> int | None:
    prefix = entry_id.split("-", 1)[0]
    return int(prefix) if prefix.isdigit() else None
