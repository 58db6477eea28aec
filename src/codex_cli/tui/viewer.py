"""Read-only rendering of a saved rollout."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from rich.console import Console

from ..agent.rollout import rollout_items
from .header import HeaderInfo
from .history import MessageHistory

__all__ = ["render_rollout"]


def render_rollout(
    console: Console, rollout: Dict[str, Any], model: str, provider: str, full_stdout: bool = False
) -> int:
    """Print the header and every item once; returns the item count."""
    session = rollout.get("session") or {}
    header = HeaderInfo(
        model=model,
        provider=provider,
        approval_policy="view only",
        cwd=str(Path.cwd()),
        session_id=str(session.get("id")) if session.get("id") else None,
    )
    history = MessageHistory(console, header, full_stdout=full_stdout)
    items = rollout_items(rollout)
    history.extend(items)
    history.flush()
    return len(items)
