"""``--config``: open the instructions file in the user's editor."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import sys
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from ..config.defaults import instructions_path
from ..config.loader import bootstrap_config_dir

__all__ = ["default_editor", "edit_instructions"]

logger = logging.getLogger(__name__)


def default_editor(env: Optional[Mapping[str, str]] = None, platform: str = sys.platform) -> str:
    env = os.environ if env is None else env
    editor = (env.get("EDITOR") or "").strip()
    if editor:
        return editor
    return "notepad" if platform.startswith("win") else "vi"


def edit_instructions(
    base: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    run: Callable[[List[str]], int] = subprocess.call,
) -> int:
    """Make sure the config dir exists, then block on the editor.

    Returns the exit status for the CLI: 0 once the editor exits, 1 when it
    cannot be started.
    """
    try:
        path = bootstrap_config_dir(base)
    except OSError as exc:
        logger.debug("config bootstrap failed: %s", exc)
        path = instructions_path(base)
    command = shlex.split(default_editor(env)) + [str(path)]
    try:
        run(command)
    except OSError as exc:
        print(f"Failed to launch editor {command[0]!r}: {exc}", file=sys.stderr)
        return 1
    return 0
