"""Tests for structured logging setup."""

import json
import logging

import pytest
import structlog

from vitalsim.config import LoggingConfig
from vitalsim.observability import configure_logging


@pytest.fixture(autouse=True)
def reset_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_format_emits_one_object_per_event(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(LoggingConfig(level="INFO", format="json"))

    structlog.get_logger("vitalsim.test").info("reading_ingested", device_id="d1")

    line = capsys.readouterr().out.strip().splitlines()[-1]
    event = json.loads(line)
    assert event["event"] == "reading_ingested"
    assert event["device_id"] == "d1"
    assert event["level"] == "info"


def test_level_filters_lower_events(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(LoggingConfig(level="WARNING", format="console"))

    structlog.get_logger("vitalsim.test").info("quiet_event")

    assert "quiet_event" not in capsys.readouterr().out
    assert logging.getLogger().level == logging.WARNING
