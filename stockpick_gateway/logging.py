"""
Logging setup for the StockPick gateway.

Records emitted while a catalog build is running carry that build's id, so the
per-exchange parse lines of one build can be grouped. Output is plain text, or
one JSON object per line when `STOCKPICK_LOG_JSON` is set.
"""

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime

current_build_id: ContextVar[str | None] = ContextVar("current_build_id", default=None)

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(build_tag)s%(message)s"

QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


class BuildIdFilter(logging.Filter):
    """Stamps every record with the id of the catalog build in progress."""

    def filter(self, record: logging.LogRecord) -> bool:
        build_id = current_build_id.get()
        record.build_id = build_id
        record.build_tag = f"[build {build_id}] " if build_id else ""
        return True


class JsonLineFormatter(logging.Formatter):
    """Formats a record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        build_id = getattr(record, "build_id", None)
        if build_id:
            entry["build_id"] = build_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(level: str = "INFO", json_output: bool = False) -> logging.Logger:
    """
    Route all logging to stdout.

    Args:
        level: Root log level name
        json_output: Emit JSON lines instead of text

    Returns:
        The configured root logger
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(BuildIdFilter())
    handler.setFormatter(JsonLineFormatter() if json_output else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


@contextmanager
def build_context(build_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with `build_id`."""
    token = current_build_id.set(build_id)
    try:
        yield
    finally:
        current_build_id.reset(token)
