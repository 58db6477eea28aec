#!/usr/bin/env python3
"""codex CLI entrypoint.

A thin shell: optional native delegation, logging setup, argument parsing,
then one async dispatch whose result becomes the process exit status.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import Final, Optional, Sequence

from rich.console import Console

from ..exceptions import CodexError, MissingApiKeyError
from ..utils.structured_logging import setup_logging
from ..utils.terminal import (
    install_exit_handlers,
    on_exit,
    remove_exit_handlers,
    set_live_renderer,
)
from .dispatch import dispatch
from .native import run_native, wants_native
from .parser import create_parser, parse_args

__all__: Final = ["main", "report_error"]

logger = logging.getLogger(__name__)


def report_error(err: Console, exc: CodexError) -> None:
    """Print ``exc`` the way users should see it."""
    if isinstance(exc, MissingApiKeyError):
        err.print()
        err.print(str(exc), style="red", markup=False, highlight=False)
        err.print()
        err.print(
            f"Set the environment variable [bold]{exc.env_key}[/bold] and re-run this command."
        )
        if exc.hint:
            err.print(exc.hint, markup=False, highlight=False, soft_wrap=True)
        return
    err.print(str(exc), style="red", markup=False, highlight=False, soft_wrap=True)


async def _run(console: Console, args, parser, err: Console) -> int:
    loop = asyncio.get_running_loop()
    install_exit_handlers(loop, asyncio.current_task())
    try:
        return await dispatch(console, args, parser, err_console=err)
    finally:
        remove_exit_handlers(loop)


def _exit_after_signal() -> None:
    on_exit()
    logging.shutdown()
    sys.stdout.flush()
    sys.stderr.flush()
    # A prompt thread may still be blocked reading stdin.
    os._exit(0)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entrypoint."""
    argv = list(sys.argv[1:] if argv is None else argv)
    err = Console(stderr=True)

    if wants_native():
        try:
            sys.exit(run_native(argv))
        except CodexError as exc:
            report_error(err, exc)
            sys.exit(exc.exit_code)

    log_path = setup_logging()
    if log_path is not None:
        logger.debug("debug logging to %s", log_path)

    parser = create_parser()
    args = parse_args(argv, parser)
    console = Console()
    set_live_renderer(console)

    try:
        rc = asyncio.run(_run(console, args, parser, err))
    except asyncio.CancelledError:
        logger.debug("interrupted by signal; exiting")
        _exit_after_signal()
    except CodexError as exc:
        report_error(err, exc)
        rc = exc.exit_code
    finally:
        on_exit()
    sys.exit(int(rc))


if __name__ == "__main__":
    main()
