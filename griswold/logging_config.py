"""Logging setup for the griswold tools.

Log output goes to stderr so that command output on stdout (cue lists,
project summaries) stays clean. Set ``GRISWOLD_ENV=production`` to get one
JSON object per line for log shippers.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional

# Passed via ``extra=`` by project loading, storage and cue export
CONTEXT_FIELDS = ("project", "path", "bytes", "cue_count")

CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with any project context attached."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update({
            key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)
        })
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def use_json_logs() -> bool:
    return os.environ.get("GRISWOLD_ENV", "development").lower() in ("production", "prod", "staging")


def configure_logging(level: int = logging.INFO, json_logs: Optional[bool] = None) -> None:
    """Replace root handlers with a single stderr handler at ``level``."""
    if json_logs is None:
        json_logs = use_json_logs()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        JSONFormatter() if json_logs else logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S")
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # asyncio is chatty at DEBUG when the autosaver runs
    logging.getLogger("asyncio").setLevel(max(level, logging.WARNING))
