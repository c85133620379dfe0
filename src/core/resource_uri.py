"""Resource identifier model and URI parsing helpers.

This module centralizes how versioned resources are identified.
A resource is a scheme tag plus an absolute POSIX path; its normalized
URI string is the identity used for equality and storage keys.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path, PurePosixPath
import posixpath
from urllib.parse import quote, unquote, urlsplit

from core.constants import FILE_SCHEME
from core.errors import HistoryResourceError


@dataclass(frozen=True)
class Resource:
    """Stable identifier of a versioned resource.

    Attributes:
        scheme: Lower-case scheme naming the backing store, e.g. ``file``.
        path: Normalized absolute POSIX path.
    """

    scheme: str
    path: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "scheme", _normalize_scheme(self.scheme))
        object.__setattr__(self, "path", _normalize_path(self.path))

    @classmethod
    def file(cls, path: str | os.PathLike[str]) -> "Resource":
        """Build a ``file`` resource from a local filesystem path."""
        absolute = Path(path).expanduser().absolute()
        return cls(scheme=FILE_SCHEME, path=absolute.as_posix())

    @classmethod
    def parse(cls, uri: str) -> "Resource":
        """Parse a normalized URI string back into a resource."""
        return parse_resource_uri(uri)

    def with_scheme(self, scheme: str) -> "Resource":
        """Return the same path under a different scheme."""
        return Resource(scheme=scheme, path=self.path)

    @property
    def fs_path(self) -> Path:
        """Local filesystem path for the resource path component."""
        return Path(self.path)

    @property
    def basename(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def suffix(self) -> str:
        return PurePosixPath(self.path).suffix

    def __str__(self) -> str:
        return f"{self.scheme}://{quote(self.path, safe='/')}"


def parse_resource_uri(uri: str) -> Resource:
    """Parse and validate a resource URI.

    Args:
        uri: URI in format ``scheme:///absolute/path``.

    Returns:
        Parsed resource.

    Raises:
        HistoryResourceError: If the URI has no scheme or no path.
    """
    parts = urlsplit(uri)
    if not parts.scheme or not parts.path:
        raise HistoryResourceError(
            f"Invalid resource URI '{uri}': expected scheme:///absolute/path. "
            "Provide both a scheme and an absolute path."
        )
    return Resource(scheme=parts.scheme, path=unquote(parts.path))


def _normalize_scheme(scheme: str) -> str:
    normalized = scheme.strip().lower()
    if not normalized:
        raise HistoryResourceError("Invalid resource: scheme must not be empty.")
    return normalized


def _normalize_path(path: str) -> str:
    if not path:
        raise HistoryResourceError("Invalid resource: path must not be empty.")
    normalized = posixpath.normpath(path.replace("\\", "/"))
    if not normalized.startswith("/"):
        normalized = "/" + normalized
    # normpath keeps a leading double slash
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized
