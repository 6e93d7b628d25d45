"""
Logging — One stderr handler for the CLI and the admin server.

LOG_FORMAT picks the rendering (default `text`):

    text   12:34:56 INFO    [orchestrator   ] [replicate] pushed  run=R-1 target=t1
    json   {"ts": ..., "level": ..., "logger": ..., "message": ..., "run_id": ...}

LOG_LEVEL sets the threshold (default INFO).

Replication code tags records through `extra=` with the keys in
CONTEXT_FIELDS, so every line of a push can be tied back to its run and
target whichever format is active.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, TextIO

# extra= key → short label used in text output
CONTEXT_FIELDS = {
    "run_id": "run",
    "repo_id": "repo",
    "target_id": "target",
    "strategy": "strategy",
}

# Third-party loggers that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "werkzeug")

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[1;31m",
}
RESET = "\033[0m"


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Replication context attached to `record`, in CONTEXT_FIELDS order."""
    return {
        key: getattr(record, key)
        for key in CONTEXT_FIELDS
        if getattr(record, key, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line, context keys at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(record_context(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Terminal output; the level is colored only when `stream` is a tty."""

    def __init__(self, stream: TextIO | None = None):
        super().__init__()
        stream = stream or sys.stderr
        self.color = hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        level = f"{record.levelname:7}"
        if self.color and record.levelname in LEVEL_COLORS:
            level = f"{LEVEL_COLORS[record.levelname]}{level}{RESET}"
        component = record.name.rsplit(".", 1)[-1][:15]

        line = f"{stamp} {level} [{component:15}] {record.getMessage()}"
        context = record_context(record)
        if context:
            tags = " ".join(f"{CONTEXT_FIELDS[k]}={v}" for k, v in context.items())
            line = f"{line}  {tags}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
) -> None:
    """
    Replace the root handlers with a single stderr handler.

    Args:
        level: Overrides LOG_LEVEL.
        format_type: `json` or `text`; overrides LOG_FORMAT.
    """
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    fmt = (format_type or os.environ.get("LOG_FORMAT", "text")).lower()
    numeric_level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter() if fmt == "json" else HumanFormatter(sys.stderr))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging to stderr: level={level_name} format={fmt}")
