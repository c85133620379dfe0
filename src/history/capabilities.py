"""External capabilities consumed by the history service.

The service reads resource bytes and checks eligibility through these
protocols. Default implementations cover local disk resources.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Protocol

from core.errors import HistoryReadError
from core.resource_uri import Resource


class ContentReader(Protocol):
    """Reads the current bytes of a resource."""

    async def read_bytes(self, resource: Resource) -> bytes: ...


class EligibilityCheck(Protocol):
    """Decides whether a resource can be captured."""

    def can_handle(self, resource: Resource) -> bool: ...


class DiskContentReader:
    """Reads resource bytes from the local filesystem."""

    async def read_bytes(self, resource: Resource) -> bytes:
        """Read the file behind a resource path.

        Args:
            resource: Resource to read.

        Returns:
            File content bytes.

        Raises:
            HistoryReadError: If the file is missing or unreadable.
        """
        return await asyncio.to_thread(_read_file_bytes, resource)


class SchemeEligibility:
    """Accepts resources whose scheme is in a fixed supported set."""

    def __init__(self, schemes: Iterable[str]) -> None:
        self._schemes = frozenset(scheme.lower() for scheme in schemes)

    @property
    def schemes(self) -> frozenset[str]:
        return self._schemes

    def can_handle(self, resource: Resource) -> bool:
        return resource.scheme in self._schemes


def _read_file_bytes(resource: Resource) -> bytes:
    file_path = resource.fs_path
    try:
        return file_path.read_bytes()
    except OSError as error:
        raise HistoryReadError(
            f"Failed to read content of {resource} at {file_path}: {error}. "
            "Make sure the file exists and is readable."
        ) from error
