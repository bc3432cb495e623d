# ABOUTME: Configures stderr logging for the analytics tools and CLI.
# ABOUTME: Emits one JSON object per record so stdout stays reserved for payloads.

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        data = {k: v for k, v in vars(record).items() if k not in _RESERVED_ATTRS}
        if data:
            entry["data"] = data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: str = "INFO") -> None:
    """Install a single JSON-line stderr handler on the root logger."""

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_skill_analytics", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonLineFormatter())
    handler._skill_analytics = True
    root.addHandler(handler)
    root.setLevel(level.upper())
