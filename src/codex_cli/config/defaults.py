"""Defaults and well-known locations."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

__all__ = [
    "DEFAULT_MODEL",
    "DEFAULT_PROVIDER",
    "FLEX_MODE_MODELS",
    "PROJECT_DOC_FILENAMES",
    "PROJECT_DOC_MAX_BYTES",
    "PROJECT_DOC_SEPARATOR",
    "config_dir",
    "get_default_config",
    "instructions_path",
    "sessions_dir",
]

DEFAULT_MODEL = "codex-mini-latest"
DEFAULT_PROVIDER = "openai"
DEFAULT_REASONING_EFFORT = "high"
FLEX_MODE_MODELS = frozenset({"o3", "o4-mini"})

PROJECT_DOC_FILENAMES = ("AGENTS.md", "codex.md", ".codex.md", "CODEX.md")
PROJECT_DOC_MAX_BYTES = 32 * 1024
PROJECT_DOC_SEPARATOR = "\n\n--- project-doc ---\n\n"

CONFIG_FILENAMES = ("config.yaml", "config.yml", "config.json")
INSTRUCTIONS_FILENAME = "instructions.md"


def config_dir(env: Optional[Dict[str, str]] = None) -> Path:
    """Return the per-user config directory (``$CODEX_HOME`` or ``~/.codex``)."""
    env = os.environ if env is None else env
    override = env.get("CODEX_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".codex"


def instructions_path(base: Optional[Path] = None) -> Path:
    return (base or config_dir()) / INSTRUCTIONS_FILENAME


def sessions_dir(base: Optional[Path] = None) -> Path:
    return (base or config_dir()) / "sessions"


def get_default_config() -> Dict[str, Any]:
    """Return a fresh copy of the default configuration."""
    return {
        "model": DEFAULT_MODEL,
        "provider": DEFAULT_PROVIDER,
        "approval_mode": None,
        "notify": False,
        "reasoning_effort": DEFAULT_REASONING_EFFORT,
        "flex_mode": False,
        "disable_response_storage": False,
        "pretty_print": True,
        "full_stdout": False,
        "providers": {},
    }
