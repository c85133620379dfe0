"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

SAMPLE_FOO_CONTENT = "Hello Foo"
SAMPLE_BAR_CONTENT = "".join(
    [
        "Lorem ipsum ",
        "dolor öäü sit amet ",
        "adipiscing ßß elit",
        "consectetur ",
    ]
)


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def sample_files(tmp_path: Path) -> tuple[Path, Path]:
    """Write the two sample source files used by capture tests."""
    foo_path = tmp_path / "workspace" / "foo.txt"
    bar_path = tmp_path / "workspace" / "bar.txt"
    foo_path.parent.mkdir(parents=True)
    foo_path.write_text(SAMPLE_FOO_CONTENT, encoding="utf-8")
    bar_path.write_text(SAMPLE_BAR_CONTENT, encoding="utf-8")
    return foo_path, bar_path
