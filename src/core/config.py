"""Runtime configuration model for local history.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_DATA_ROOT,
    DEFAULT_MAX_ENTRIES,
    DEFAULT_MAX_FILE_SIZE_KB,
    DEFAULT_SUPPORTED_SCHEMES,
    HISTORY_DIR_NAME,
)
from core.errors import HistoryConfigError


@dataclass(frozen=True)
class HistoryConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory holding the history store.
        max_entries: Retention limit per resource, ``None`` for unlimited.
        max_file_size_kb: Largest capturable content in KiB, ``None`` for unlimited.
        supported_schemes: Resource schemes eligible for capture.
    """

    data_root: Path
    max_entries: int | None
    max_file_size_kb: int | None
    supported_schemes: tuple[str, ...]

    @property
    def history_root(self) -> Path:
        """Directory under which per-resource history directories live."""
        return self.data_root / HISTORY_DIR_NAME

    @property
    def max_file_size_bytes(self) -> int | None:
        """Content size limit in bytes, or ``None`` when unlimited."""
        if self.max_file_size_kb is None:
            return None
        return self.max_file_size_kb * 1024

    @classmethod
    def from_env(cls) -> "HistoryConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            HistoryConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("LOCAL_HISTORY_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        max_entries = _parse_limit(
            "LOCAL_HISTORY_MAX_ENTRIES",
            os.getenv("LOCAL_HISTORY_MAX_ENTRIES", str(DEFAULT_MAX_ENTRIES)),
        )
        max_file_size_kb = _parse_limit(
            "LOCAL_HISTORY_MAX_FILE_SIZE_KB",
            os.getenv("LOCAL_HISTORY_MAX_FILE_SIZE_KB", str(DEFAULT_MAX_FILE_SIZE_KB)),
        )
        schemes_value = os.getenv("LOCAL_HISTORY_SCHEMES", ",".join(DEFAULT_SUPPORTED_SCHEMES))
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            max_entries=max_entries,
            max_file_size_kb=max_file_size_kb,
            supported_schemes=_parse_schemes(schemes_value),
        )


def _parse_limit(variable_name: str, raw_value: str) -> int | None:
    """Parse a non-negative limit where zero disables the limit.

    Args:
        variable_name: Environment variable name for error messages.
        raw_value: Raw string from environment.

    Returns:
        Parsed limit, or ``None`` when disabled.

    Raises:
        HistoryConfigError: If value is not a non-negative integer.
    """
    try:
        limit = int(raw_value)
    except ValueError as error:
        raise HistoryConfigError(
            f"Invalid {variable_name} value: "
            f"expected integer, got '{raw_value}'. "
            f"Set {variable_name} to a numeric value."
        ) from error
    if limit < 0:
        raise HistoryConfigError(
            f"Invalid {variable_name} value: expected >= 0, got {limit}. "
            "Use 0 to disable the limit."
        )
    return limit or None


def _parse_schemes(raw_value: str) -> tuple[str, ...]:
    """Parse the comma-separated supported scheme list."""
    schemes = tuple(item.strip().lower() for item in raw_value.split(",") if item.strip())
    if not schemes:
        raise HistoryConfigError(
            "Invalid LOCAL_HISTORY_SCHEMES value: no schemes given. "
            "Set LOCAL_HISTORY_SCHEMES to a comma-separated list such as 'file'."
        )
    return schemes
