"""Structured Logging — verifies JSON output and extra-field surfacing."""

import json
import logging
from uuid import uuid4

from swapbridge.infrastructure.observability import (
    ConsoleFormatter, JSONFormatter, setup_logging,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "swapbridge.test", logging.WARNING, __file__, 1, "Settled %d swap(s)", (3,), None,
    )
    record.__dict__.update(extra)
    return record


def test_base_fields_present():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "WARNING"
    assert log["logger"] == "swapbridge.test"
    assert log["message"] == "Settled 3 swap(s)"
    assert "timestamp" in log


def test_extra_fields_surfaced_and_stringified():
    batch = uuid4()
    log = json.loads(JSONFormatter().format(_record(
        batch_uuid=batch, swap_count=3, swap_direction="loki_to_bloki",
    )))
    assert log["batch_uuid"] == str(batch)
    assert log["swap_count"] == 3
    assert log["swap_direction"] == "loki_to_bloki"


def test_unknown_extras_ignored():
    log = json.loads(JSONFormatter().format(_record(secret="do-not-log")))
    assert "secret" not in log


def test_console_formatter_appends_context():
    line = ConsoleFormatter().format(_record(swap_direction="bloki_to_loki"))
    assert "Settled 3 swap(s)" in line
    assert line.endswith("swap_direction=bloki_to_loki")


def test_setup_logging_installs_one_handler():
    before = len(logging.root.handlers)
    setup_logging("DEBUG", "console")
    setup_logging("INFO", "json")
    assert len(logging.root.handlers) <= before + 1
    assert logging.getLogger("httpx").level == logging.WARNING
