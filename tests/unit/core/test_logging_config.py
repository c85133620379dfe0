"""Unit tests for structured logging configuration."""

from __future__ import annotations

import json
import logging

import pytest

from core.logging_config import get_logger


def test_get_logger_renders_json_events(caplog: pytest.LogCaptureFixture) -> None:
    """Structured fields should reach standard logging as one JSON line."""
    caplog.set_level(logging.INFO)

    get_logger("tests.logging").info("history_test_event", entry_id="000001-abcdef")
    payload = json.loads(caplog.records[-1].getMessage())

    assert {key: payload[key] for key in ("event", "entry_id", "level", "logger")} == {
        "event": "history_test_event",
        "entry_id": "000001-abcdef",
        "level": "info",
        "logger": "tests.logging",
    }


def test_debug_events_are_filtered_by_level(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    get_logger("tests.logging.debug").debug("history_hidden_event")

    assert not any("history_hidden_event" in record.getMessage() for record in caplog.records)
