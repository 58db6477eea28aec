"""Rendering of single response items."""

from __future__ import annotations

import json
from typing import Any, Mapping

from rich.console import Group, RenderableType
from rich.markdown import Markdown
from rich.text import Text

from ..agent.items import ItemKind, classify, message_text, output_metadata
from ..agent.parsers import parse_tool_call, parse_tool_call_output

__all__ = ["MAX_OUTPUT_LINES", "output_header", "render_response_item", "truncate_output"]

MAX_OUTPUT_LINES = 4


def truncate_output(text: str, full: bool = False, limit: int = MAX_OUTPUT_LINES) -> str:
    lines = text.splitlines()
    if full or len(lines) <= limit:
        return text
    hidden = len(lines) - limit
    return "\n".join(lines[:limit] + [f"... ({hidden} more lines)"])


def output_header(item: Mapping[str, Any]) -> str:
    """``command.stdout (code: n, duration: s)``; the parenthetical needs metadata."""
    meta = output_metadata(item)
    parts = []
    if meta["exit_code"] is not None:
        parts.append(f"code: {meta['exit_code']}")
    if meta["duration_seconds"] is not None:
        parts.append(f"duration: {meta['duration_seconds']:g}s")
    return "command.stdout" + (f" ({', '.join(parts)})" if parts else "")


def _render_message(item: Mapping[str, Any]) -> RenderableType:
    role = str(item.get("role", ""))
    text = message_text(item)
    if role == "assistant":
        return Group(Text("codex", style="bold magenta"), Markdown(text))
    label_style = "bold cyan" if role == "user" else "bold yellow"
    return Group(Text(role, style=label_style), Text(text))


def _render_function_call(item: Mapping[str, Any]) -> RenderableType:
    details = parse_tool_call(item)
    readable = details.cmd_readable_text if details else str(item.get("name", ""))
    line = Text("command", style="bold magenta")
    line.append("\n$ ", style="bold")
    line.append(readable)
    return line


def _render_function_output(item: Mapping[str, Any], full_stdout: bool) -> RenderableType:
    text, meta = parse_tool_call_output(item.get("output"))
    if meta and not isinstance(item.get("metadata"), Mapping):
        item = {**item, "metadata": meta}
    exit_code = output_metadata(item)["exit_code"]
    style = "red" if exit_code not in (None, 0) else "dim"
    return Group(
        Text(output_header(item), style=f"bold {style}"),
        Text(truncate_output(text, full=full_stdout), style="dim"),
    )


def _render_reasoning(item: Mapping[str, Any]) -> RenderableType:
    summary = item.get("summary") or []
    lines = [
        str(s.get("text", "")) if isinstance(s, Mapping) else str(s) for s in summary
    ]
    return Group(Text("thinking", style="bold dim"), Markdown("\n\n".join(lines)))


def render_response_item(item: Mapping[str, Any], full_stdout: bool = False) -> RenderableType:
    kind = classify(item)
    if kind == ItemKind.MESSAGE:
        return _render_message(item)
    if kind == ItemKind.FUNCTION_CALL:
        return _render_function_call(item)
    if kind == ItemKind.FUNCTION_CALL_OUTPUT:
        return _render_function_output(item, full_stdout)
    if kind == ItemKind.REASONING:
        return _render_reasoning(item)
    return Text(json.dumps(item, default=str), style="dim")
