"""Terminal restoration, shutdown signals and blocking prompts."""

from __future__ import annotations

import asyncio
import logging
import signal
import threading
from typing import Any, Callable, List, Optional, TypeVar

from rich.console import Console
from rich.live import Live

__all__ = [
    "install_exit_handlers",
    "on_exit",
    "remove_exit_handlers",
    "run_prompt",
    "set_live_renderer",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")

SHUTDOWN_SIGNALS = ("SIGINT", "SIGQUIT", "SIGTERM")

_console: Optional[Console] = None
_live: Optional[Live] = None


def set_live_renderer(console: Optional[Console], live: Optional[Live] = None) -> None:
    """Register the console (and any active live region) to restore on exit."""
    global _console, _live
    _console = console
    _live = live


def on_exit() -> None:
    """Restore the terminal: stop the live region and show the cursor."""
    global _live
    if _live is not None:
        try:
            _live.stop()
        except Exception as exc:  # restoring must never raise during shutdown
            logger.debug("failed to stop live region: %s", exc)
        _live = None
    if _console is not None and _console.is_terminal:
        _console.show_cursor(True)


def _shutdown_signals() -> List[signal.Signals]:
    return [getattr(signal, name) for name in SHUTDOWN_SIGNALS if hasattr(signal, name)]


def install_exit_handlers(loop: asyncio.AbstractEventLoop, task: "asyncio.Task[Any]") -> None:
    """Route SIGINT, SIGQUIT and SIGTERM to one shutdown path.

    The terminal is restored first, then ``task`` is cancelled so its
    ``finally`` blocks (saving the session, closing clients) still run.
    Ctrl-C at a prompt arrives here as SIGINT since input is read in cooked
    mode.
    """

    def _shutdown(signum: int) -> None:
        logger.debug("received signal %s", signum)
        on_exit()
        task.cancel()

    for sig in _shutdown_signals():
        try:
            loop.add_signal_handler(sig, _shutdown, sig)
        except NotImplementedError:
            # Windows event loops have no add_signal_handler.
            signal.signal(
                sig, lambda signum, _frame: loop.call_soon_threadsafe(_shutdown, signum)
            )


def remove_exit_handlers(loop: asyncio.AbstractEventLoop) -> None:
    for sig in _shutdown_signals():
        try:
            loop.remove_signal_handler(sig)
        except NotImplementedError:
            default = signal.default_int_handler if sig == signal.SIGINT else signal.SIG_DFL
            signal.signal(sig, default)


async def run_prompt(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking prompt such as ``Prompt.ask`` without blocking the loop.

    The call runs on a daemon thread rather than the default executor, which
    ``asyncio.run`` joins on shutdown; a thread still parked in ``input()``
    must not keep the process alive after a signal.
    """
    loop = asyncio.get_running_loop()
    future: "asyncio.Future[T]" = loop.create_future()

    def _deliver(result: Any, error: Optional[BaseException]) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def _worker() -> None:
        result: Any = None
        error: Optional[BaseException] = None
        try:
            result = fn(*args, **kwargs)
        except Exception as exc:
            error = exc
        try:
            loop.call_soon_threadsafe(_deliver, result, error)
        except RuntimeError:
            logger.debug("event loop closed before the prompt returned")

    threading.Thread(target=_worker, name="codex-prompt", daemon=True).start()
    return await future
