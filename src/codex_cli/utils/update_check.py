"""
Best-effort check for a newer release on PyPI.

Runs at most once per day; the last check time is kept in the config
directory. Every failure is logged at debug level and ignored.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiohttp
from rich.console import Console
from rich.panel import Panel

from ..version import __version__

__all__ = ["check_for_updates", "is_newer"]

logger = logging.getLogger(__name__)

PACKAGE_NAME = "codex-cli"
PYPI_URL = f"https://pypi.org/pypi/{PACKAGE_NAME}/json"
CHECK_INTERVAL = timedelta(days=1)
STATE_FILENAME = "update-check.json"


def _version_tuple(value: str) -> Tuple[int, ...]:
    return tuple(int(p) for p in re.findall(r"\d+", value)[:3])


def is_newer(latest: str, current: str) -> bool:
    try:
        return _version_tuple(latest) > _version_tuple(current)
    except ValueError:
        return False


def _last_checked(state_file: Path) -> Optional[datetime]:
    try:
        data = json.loads(state_file.read_text(encoding="utf-8"))
        return datetime.fromisoformat(str(data["last_check"]))
    except (OSError, ValueError, KeyError, TypeError):
        return None


async def _fetch_latest(timeout_seconds: float) -> Optional[str]:
    timeout = aiohttp.ClientTimeout(total=timeout_seconds)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        async with session.get(PYPI_URL) as resp:
            if resp.status != 200:
                return None
            data = await resp.json(content_type=None)
    return str((data or {}).get("info", {}).get("version") or "") or None


async def check_for_updates(
    config_dir: Path,
    console: Console,
    *,
    now: Optional[datetime] = None,
    timeout_seconds: float = 3.0,
) -> Optional[str]:
    """Print a notice when a newer version exists; returns that version."""
    now = now or datetime.now(timezone.utc)
    state_file = config_dir / STATE_FILENAME
    last = _last_checked(state_file)
    if last is not None and now - last < CHECK_INTERVAL:
        return None
    try:
        latest = await _fetch_latest(timeout_seconds)
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
        logger.debug("update check failed: %s", exc)
        return None
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
        state_file.write_text(json.dumps({"last_check": now.isoformat()}), encoding="utf-8")
    except OSError as exc:
        logger.debug("could not record update check: %s", exc)
    if not latest or not is_newer(latest, __version__):
        return None
    console.print(
        Panel(
            f"Update available! [dim]{__version__}[/dim] → [green]{latest}[/green]\n"
            f"Run [cyan]pip install -U {PACKAGE_NAME}[/cyan] to update.",
            border_style="yellow",
            expand=False,
        )
    )
    return latest
