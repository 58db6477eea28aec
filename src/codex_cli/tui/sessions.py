"""Saved-session browser for ``--history``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from ..agent.rollout import SessionSummary

__all__ = ["SessionSelection", "build_sessions_table", "select_session"]

PREVIEW_CHARS = 60

AskFn = Callable[..., str]


@dataclass(frozen=True)
class SessionSelection:
    path: Path
    mode: str  # "view" | "resume"


def build_sessions_table(sessions: List[SessionSummary]) -> Table:
    table = Table(title="Saved sessions", show_lines=False)
    table.add_column("#", justify="right", style="bold")
    table.add_column("Started", style="cyan")
    table.add_column("Msgs", justify="right")
    table.add_column("Cmds", justify="right")
    table.add_column("First message", overflow="ellipsis")
    for idx, s in enumerate(sessions, 1):
        preview = s.first_message
        if len(preview) > PREVIEW_CHARS:
            preview = preview[: PREVIEW_CHARS - 1] + "…"
        table.add_row(
            str(idx), s.timestamp[:19].replace("T", " "), str(s.user_messages), str(s.tool_calls), preview
        )
    return table


def select_session(
    console: Console,
    sessions: List[SessionSummary],
    ask: AskFn = Prompt.ask,
) -> Optional[SessionSelection]:
    """Show the table and let the user pick; ``None`` means cancelled."""
    if not sessions:
        console.print("[yellow]No saved sessions found.[/yellow]")
        return None
    console.print(build_sessions_table(sessions))
    choices = [str(i) for i in range(1, len(sessions) + 1)] + ["q"]
    picked = ask("Select a session (q to cancel)", choices=choices, default="q", console=console)
    if picked == "q":
        return None
    session = sessions[int(picked) - 1]
    action = ask(
        "[v]iew or [r]esume? (q to cancel)", choices=["v", "r", "q"], default="v", console=console
    )
    if action == "q":
        return None
    return SessionSelection(session.path, "view" if action == "v" else "resume")
