"""Response item helpers.

Items stay plain dicts exactly as the Responses API returns them; these
helpers classify them by their ``type`` discriminant so callers can branch
on an :class:`ItemKind` instead of poking at raw keys.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

__all__ = [
    "ItemKind",
    "ResponseItem",
    "classify",
    "content_part_text",
    "is_empty_reasoning",
    "item_key",
    "message_text",
    "output_metadata",
]

ResponseItem = Dict[str, Any]


class ItemKind(str, Enum):
    MESSAGE = "message"
    FUNCTION_CALL = "function_call"
    FUNCTION_CALL_OUTPUT = "function_call_output"
    REASONING = "reasoning"
    OTHER = "other"


def classify(item: Mapping[str, Any]) -> ItemKind:
    try:
        return ItemKind(item.get("type"))
    except ValueError:
        return ItemKind.OTHER


def content_part_text(part: Mapping[str, Any]) -> str:
    """Text for one content part of a message."""
    ptype = part.get("type")
    if ptype in ("output_text", "input_text"):
        return str(part.get("text", ""))
    if ptype == "input_image":
        return "<Image>"
    if ptype == "input_file":
        return str(part.get("filename", ""))
    if ptype == "refusal":
        return str(part.get("refusal", ""))
    return "?"


def message_text(item: Mapping[str, Any], sep: str = " ") -> str:
    parts: List[Mapping[str, Any]] = item.get("content") or []
    return sep.join(content_part_text(p) for p in parts if isinstance(p, Mapping))


def is_empty_reasoning(item: Mapping[str, Any]) -> bool:
    """True when the item carries a ``summary`` that is present but empty."""
    summary = item.get("summary")
    return isinstance(summary, list) and len(summary) == 0


def item_key(item: Mapping[str, Any], index: int) -> str:
    # Item ids repeat across a resumed session, so the position is part of the key.
    return f"{item.get('id')}-{index}"


def output_metadata(item: Mapping[str, Any]) -> Dict[str, Optional[float]]:
    """Exit code and duration attached to a ``function_call_output`` item."""
    meta = item.get("metadata")
    meta = meta if isinstance(meta, Mapping) else {}
    exit_code = meta.get("exit_code")
    duration = meta.get("duration_seconds")
    return {
        "exit_code": exit_code if _is_number(exit_code) else None,
        "duration_seconds": duration if _is_number(duration) else None,
    }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
