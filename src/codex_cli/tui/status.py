"""Ephemeral thinking indicator."""

from __future__ import annotations

import time
from typing import Optional

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.text import Text

from ..utils.terminal import set_live_renderer

__all__ = ["ThinkingIndicator", "format_elapsed"]


def format_elapsed(seconds: float) -> str:
    if seconds < 60:
        return f"{int(seconds)}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs:02d}s"


class ThinkingIndicator:
    """A transient single-line status redrawn in place while the model works."""

    def __init__(self, console: Console, label: str = "Thinking"):
        self.console = console
        self.label = label
        self._live: Optional[Live] = None
        self._started: Optional[float] = None
        self._spinner = Spinner("dots", style="cyan")

    @property
    def active(self) -> bool:
        return self._live is not None

    def elapsed(self) -> float:
        return 0.0 if self._started is None else time.monotonic() - self._started

    def _render(self):
        self._spinner.text = Text.assemble(
            (self.label, "bold"), (f" ({format_elapsed(self.elapsed())})", "dim"),
            ("  press Ctrl+C to interrupt", "dim"),
        )
        return self._spinner

    def start(self) -> None:
        if self._live is not None:
            return
        self._started = time.monotonic()
        self._live = Live(
            get_renderable=self._render,
            console=self.console,
            refresh_per_second=8,
            transient=True,
        )
        self._live.start()
        set_live_renderer(self.console, self._live)

    def stop(self) -> None:
        if self._live is None:
            return
        self._live.stop()
        self._live = None
        self._started = None
        set_live_renderer(self.console)

    def set_loading(self, loading: bool) -> None:
        if loading:
            self.start()
        else:
            self.stop()
