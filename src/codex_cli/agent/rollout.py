"""Saved session transcripts (rollouts)."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..config.defaults import sessions_dir
from ..exceptions import RolloutError
from .items import ItemKind, ResponseItem, classify, message_text

__all__ = [
    "SessionSummary",
    "list_sessions",
    "load_rollout",
    "resolve_rollout_path",
    "rollout_items",
    "save_rollout",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSummary:
    path: Path
    session_id: str
    timestamp: str
    user_messages: int
    tool_calls: int
    first_message: str


def resolve_rollout_path(raw: str, cwd: Optional[Path] = None) -> Path:
    path = Path(raw).expanduser()
    return path if path.is_absolute() else (cwd or Path.cwd()) / path


def load_rollout(path: Path) -> Dict[str, Any]:
    """Read a rollout document.

    Raises:
        RolloutError: when the file is unreadable or not a rollout object.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise RolloutError(str(exc)) from exc
    if not isinstance(data, dict):
        raise RolloutError(f"{path}: expected a JSON object")
    return data


def rollout_items(rollout: Dict[str, Any]) -> List[ResponseItem]:
    items = rollout.get("items") or []
    return [i for i in items if isinstance(i, dict)]


def save_rollout(
    session_id: str,
    items: Sequence[ResponseItem],
    instructions: str = "",
    base: Optional[Path] = None,
    started_at: Optional[datetime] = None,
) -> Optional[Path]:
    """Persist a session; failures are logged and reported as ``None``."""
    started = started_at or datetime.now(timezone.utc)
    stamp = started.strftime("%Y-%m-%dT%H-%M-%S")
    target_dir = sessions_dir(base)
    path = target_dir / f"rollout-{stamp}-{session_id}.json"
    document = {
        "session": {
            "id": session_id,
            "timestamp": started.isoformat(),
            "instructions": instructions,
        },
        "items": list(items),
    }
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(document, fh, indent=2)
    except OSError as exc:
        logger.warning("could not save rollout %s: %s", path, exc)
        return None
    return path


def _summarize(path: Path) -> Optional[SessionSummary]:
    try:
        data = load_rollout(path)
    except RolloutError as exc:
        logger.debug("skipping unreadable session %s: %s", path, exc)
        return None
    session = data.get("session") or {}
    items = rollout_items(data)
    user = [
        i
        for i in items
        if classify(i) == ItemKind.MESSAGE and i.get("role") == "user"
    ]
    calls = sum(1 for i in items if classify(i) == ItemKind.FUNCTION_CALL)
    first = message_text(user[0]) if user else ""
    return SessionSummary(
        path=path,
        session_id=str(session.get("id", "")),
        timestamp=str(session.get("timestamp", "")),
        user_messages=len(user),
        tool_calls=calls,
        first_message=first.replace("\n", " "),
    )


def list_sessions(base: Optional[Path] = None) -> List[SessionSummary]:
    """Saved sessions, newest first."""
    root = sessions_dir(base)
    if not root.exists():
        return []
    summaries = [
        s
        for s in (_summarize(p) for p in root.glob("rollout-*.json"))
        if s is not None
    ]
    summaries.sort(key=lambda s: (s.timestamp, s.path.name), reverse=True)
    return summaries
