"""Structured Logging — JSON and console formatters for settlement observability.

Invariants:
    - Every record carries timestamp, level, logger name and message
    - Settlement context (swap_direction, batch_uuid, swap_count, ...) surfaced when
      passed via `extra=`; anything else in `extra` is dropped (secrets stay out)
    - setup_logging is idempotent: the API lifespan and the CLI may both call it
    - httpx request logs are capped at WARNING (wallet RPC urls can carry credentials)

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - Console format appends the same context fields as key=value pairs
"""

import json
import logging
from datetime import datetime, timezone

CONTEXT_FIELDS = (
    "error_code", "path", "swap_direction", "client_account_uuid",
    "batch_uuid", "swap_count", "attempt", "network",
)

_handler: logging.Handler | None = None


def _context(record: logging.LogRecord) -> dict:
    context = {}
    for key in CONTEXT_FIELDS:
        value = record.__dict__.get(key)
        if value is not None:
            context[key] = value if isinstance(value, (int, float, bool)) else str(value)
    return context


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Human-readable lines for local runs and the operator CLI."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if context:
            line += " " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install the root handler once; later calls only swap formatter and level."""
    global _handler
    if _handler is None:
        _handler = logging.StreamHandler()
        logging.root.addHandler(_handler)
    _handler.setFormatter(JSONFormatter() if fmt == "json" else ConsoleFormatter())
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("httpx").setLevel(logging.WARNING)
