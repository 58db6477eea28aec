"""Structured logging utilities for codex-cli."""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Optional

__all__ = ["JSONFormatter", "debug_enabled", "log_file_path", "setup_logging"]

_TRUTHY = {"1", "true", "yes", "on"}
_NOISY_THIRD_PARTY_LOGGERS = ("aiohttp", "aiohttp.access", "asyncio")

_LOG_RECORD_IGNORED_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "taskName",
    "exc_info",
    "exc_text",
    "stack_info",
    "getMessage",
}


class JSONFormatter(logging.Formatter):
    """Format log records as JSON Lines."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        entry = {
            "timestamp": _to_iso_millis(datetime.now(timezone.utc)),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _LOG_RECORD_IGNORED_FIELDS:
                continue
            entry[key] = _json_safe(value)

        return json.dumps(entry)


def debug_enabled(env: Optional[Mapping[str, str]] = None) -> bool:
    value = (env if env is not None else os.environ).get("DEBUG", "")
    return value.strip().lower() in _TRUTHY


def log_file_path() -> Path:
    """Location of the debug log: ``$TMPDIR/oai-codex/codex-cli-latest.log``."""
    return Path(tempfile.gettempdir()) / "oai-codex" / "codex-cli-latest.log"


def setup_logging(
    debug: Optional[bool] = None,
    log_path: Optional[Path] = None,
) -> Optional[Path]:
    """Configure the root logger for one CLI run.

    With ``debug`` every record goes to the JSONL file and the path is
    returned; otherwise only warnings are written to stderr so the terminal
    UI stays clean.
    """
    if debug is None:
        debug = debug_enabled()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    target: Optional[Path] = None
    if debug:
        target = log_path or log_file_path()
        target.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(target, mode="w")
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(JSONFormatter())
        root_logger.setLevel(logging.DEBUG)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.WARNING)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root_logger.setLevel(logging.WARNING)
    root_logger.addHandler(handler)
    _limit_third_party_noise()
    return target


def _limit_third_party_noise() -> None:
    for name in _NOISY_THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _to_iso_millis(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def _json_safe(value: object) -> object:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value
