"""Tests for structured logging configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from queue_slo.config import load_settings
from queue_slo.observability.logging import QUIET_LOGGERS, configure_logging, get_logger


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    level = root.level
    quiet_levels = {name: logging.getLogger(name).level for name in QUIET_LOGGERS}
    yield
    structlog.reset_defaults()
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
    for name, quiet_level in quiet_levels.items():
        logging.getLogger(name).setLevel(quiet_level)


def _json_lines(err: str) -> list[dict]:
    return [json.loads(line) for line in err.splitlines() if line.strip()]


def test_events_are_json_lines_on_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(load_settings(debug=False, log_level="INFO"))

    get_logger("queue_slo.lint.baseline").info("baseline_written", violations=2)

    captured = capsys.readouterr()
    assert captured.out == ""
    [line] = _json_lines(captured.err)
    assert line["event"] == "baseline_written"
    assert line["violations"] == 2
    assert line["level"] == "info"
    assert line["logger"] == "queue_slo.lint.baseline"
    assert "timestamp" in line


def test_stdlib_records_share_the_format(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(load_settings(debug=False, log_level="INFO"))

    logging.getLogger("redis").info("connection pool created")
    logging.getLogger("redis").error("connection lost")

    [line] = _json_lines(capsys.readouterr().err)
    assert line["event"] == "connection lost"
    assert line["logger"] == "redis"


def test_level_filters_events(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(load_settings(debug=False, log_level="WARNING"))
    logger = get_logger("queue_slo.worker")

    logger.info("exporter_starting")
    logger.warning("exporter_tick_failed")

    assert [line["event"] for line in _json_lines(capsys.readouterr().err)] == [
        "exporter_tick_failed"
    ]


def test_debug_mode_renders_for_the_console(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(load_settings(debug=True, log_level="DEBUG"))

    get_logger("queue_slo.worker").info("exporter_stopped", ticks=3)

    err = capsys.readouterr().err
    assert "exporter_stopped" in err
    assert "ticks" in err
    with pytest.raises(json.JSONDecodeError):
        json.loads(err.splitlines()[0])
