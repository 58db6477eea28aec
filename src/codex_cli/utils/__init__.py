"""Utility helpers for codex-cli."""

from .structured_logging import JSONFormatter, setup_logging
from .terminal import on_exit

__all__ = ["JSONFormatter", "on_exit", "setup_logging"]
