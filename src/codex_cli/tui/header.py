"""Session header shown once at the top of the log."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rich.align import Align
from rich.panel import Panel
from rich.text import Text

from ..version import __version__

__all__ = ["HeaderInfo", "render_header"]


@dataclass(frozen=True)
class HeaderInfo:
    model: str
    provider: str
    approval_policy: str
    cwd: str
    session_id: Optional[str] = None
    version: str = __version__
    flex_mode: bool = False


def render_header(info: HeaderInfo) -> Panel:
    rows: list[Text] = []

    r1 = Text()
    r1.append("● ", style="bold green")
    r1.append("Codex ", style="bold white")
    r1.append(f"(v{info.version})", style="dim")
    if info.session_id:
        r1.append("  •  ", style="white")
        r1.append("session: ", style="bold white")
        r1.append(info.session_id, style="bright_cyan")
    rows.append(r1)

    r2 = Text()
    r2.append("workdir: ", style="bold white")
    r2.append(info.cwd, style="bright_blue")
    rows.append(r2)

    r3 = Text()
    r3.append("model: ", style="bold white")
    r3.append(info.model, style="bright_cyan")
    if info.flex_mode:
        r3.append(" (flex)", style="dim")
    r3.append("  •  ", style="white")
    r3.append("provider: ", style="bold white")
    r3.append(info.provider, style="bright_cyan")
    r3.append("  •  ", style="white")
    r3.append("approval: ", style="bold white")
    r3.append(info.approval_policy, style="bold yellow")
    rows.append(r3)

    content = Text()
    for idx, row in enumerate(rows):
        if idx:
            content.append("\n")
        content.append(row)
    return Panel(Align.left(content), style="blue", expand=False)
