"""Core constants used across local history modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".localhistory")
HISTORY_DIR_NAME = "History"
INDEX_FILE_NAME = "entries.json"
INDEX_FORMAT_VERSION = 1
RESOURCE_KEY_DIGEST_LENGTH = 16
HASH_ALGORITHM = "sha256"
ENTRY_SEQUENCE_WIDTH = 6
ENTRY_SUFFIX_LENGTH = 6
TEMP_FILE_SUFFIX = ".tmp"
FILE_SCHEME = "file"
DEFAULT_SUPPORTED_SCHEMES = (FILE_SCHEME,)
DEFAULT_ENTRY_SOURCE = "File Saved"
DEFAULT_MAX_ENTRIES = 50
DEFAULT_MAX_FILE_SIZE_KB = 256
