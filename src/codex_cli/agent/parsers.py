"""Parsing helpers for tool calls and their outputs."""

from __future__ import annotations

import json
import shlex
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

__all__ = ["ToolCallDetails", "parse_tool_call", "parse_tool_call_output"]


@dataclass(frozen=True)
class ToolCallDetails:
    cmd: List[str]
    cmd_readable_text: str
    workdir: Optional[str] = None
    timeout_ms: Optional[int] = None


def _readable(cmd: List[str]) -> str:
    # `bash -lc "<script>"` reads best as the script itself.
    if len(cmd) == 3 and cmd[0] in ("bash", "sh", "zsh") and cmd[1] in ("-lc", "-c"):
        return cmd[2]
    return shlex.join(cmd)


def parse_tool_call(item: Mapping[str, Any]) -> Optional[ToolCallDetails]:
    """Decode a ``function_call`` item's arguments; ``None`` when malformed."""
    if item.get("type") != "function_call":
        return None
    raw = item.get("arguments")
    try:
        args = json.loads(raw) if isinstance(raw, str) else raw
    except (TypeError, ValueError):
        return None
    if not isinstance(args, Mapping):
        return None
    cmd = args.get("command") or args.get("cmd")
    if isinstance(cmd, str):
        cmd = ["bash", "-lc", cmd]
    if not isinstance(cmd, list) or not cmd or not all(isinstance(c, str) for c in cmd):
        return None
    timeout = args.get("timeout")
    return ToolCallDetails(
        cmd=list(cmd),
        cmd_readable_text=_readable(list(cmd)),
        workdir=args.get("workdir") if isinstance(args.get("workdir"), str) else None,
        timeout_ms=int(timeout) if isinstance(timeout, (int, float)) else None,
    )


def parse_tool_call_output(raw: Any) -> Tuple[str, Dict[str, Any]]:
    """Split a tool output into text and metadata.

    Outputs are either plain text or a JSON document of the form
    ``{"output": "...", "metadata": {...}}``.
    """
    if not isinstance(raw, str):
        return ("" if raw is None else str(raw)), {}
    try:
        decoded = json.loads(raw)
    except ValueError:
        return raw, {}
    if isinstance(decoded, Mapping) and "output" in decoded:
        meta = decoded.get("metadata")
        return str(decoded.get("output", "")), dict(meta) if isinstance(meta, Mapping) else {}
    return raw, {}
