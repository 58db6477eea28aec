"""
Agent collaborator: response items, the model client, the turn loop,
rollout persistence and the full-context single-pass editor.
"""

from .input import create_input_item
from .items import ItemKind, ResponseItem, classify
from .loop import AgentLoop, CommandConfirmation, ExecResult, ReviewDecision
from .parsers import ToolCallDetails, parse_tool_call

__all__ = [
    "AgentLoop",
    "CommandConfirmation",
    "ExecResult",
    "ItemKind",
    "ResponseItem",
    "ReviewDecision",
    "ToolCallDetails",
    "classify",
    "create_input_item",
    "parse_tool_call",
]
