"""Terminal rendering for codex-cli."""

from .app import TerminalChatApp
from .header import HeaderInfo, render_header
from .history import BatchEntry, GroupedResponseItem, MessageHistory
from .status import ThinkingIndicator

__all__ = [
    "BatchEntry",
    "GroupedResponseItem",
    "HeaderInfo",
    "MessageHistory",
    "TerminalChatApp",
    "ThinkingIndicator",
    "render_header",
]
