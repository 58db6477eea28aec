"""Full-context single-pass editing.

The whole project (within size limits) is sent to the model in one request;
the model answers with a complete set of file operations which are shown as
diffs and applied after confirmation.
"""

from __future__ import annotations

import difflib
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

from rich.console import Console
from rich.syntax import Syntax

from ..config.models import EffectiveConfig
from ..exceptions import AgentError
from .client import ResponsesClient
from .items import ItemKind, classify, message_text

__all__ = [
    "FileContent",
    "FileOperation",
    "apply_operations",
    "collect_files",
    "parse_operations",
    "run_single_pass",
]

logger = logging.getLogger(__name__)

IGNORED_DIRS = frozenset(
    {".git", "node_modules", "__pycache__", ".venv", "venv", "dist", "build", ".mypy_cache", ".pytest_cache"}
)
MAX_FILE_BYTES = 100 * 1024
MAX_TOTAL_BYTES = 2 * 1024 * 1024

_SYSTEM = (
    "You are a code editing assistant. You receive a task and the full contents "
    "of a project. Reply with a single JSON object and nothing else, shaped as "
    '{"ops": [{"path": "<relative path>", "updated_full_content": "<entire new '
    'file>", "delete": false, "move_to": null}]}. Include only files that change. '
    "Use delete=true to remove a file and move_to to rename it."
)


@dataclass(frozen=True)
class FileContent:
    path: str
    content: str


@dataclass(frozen=True)
class FileOperation:
    path: str
    updated_full_content: Optional[str] = None
    delete: bool = False
    move_to: Optional[str] = None


def collect_files(root: Path) -> List[FileContent]:
    """Text files under ``root``, skipping ignored dirs, binaries and large files."""
    files: List[FileContent] = []
    total = 0
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS)
        for name in sorted(filenames):
            path = Path(dirpath) / name
            try:
                raw = path.read_bytes()
            except OSError:
                continue
            if len(raw) > MAX_FILE_BYTES or b"\x00" in raw:
                continue
            if total + len(raw) > MAX_TOTAL_BYTES:
                logger.warning("context limit reached; skipping remaining files")
                return files
            total += len(raw)
            rel = path.relative_to(root).as_posix()
            files.append(FileContent(rel, raw.decode("utf-8", errors="replace")))
    return files


def _task_text(prompt: str, files: List[FileContent]) -> str:
    parts = [f"# Task\n{prompt}\n", "# Files"]
    for f in files:
        parts.append(f"## {f.path}\n```\n{f.content}\n```")
    return "\n".join(parts)


def _strip_fences(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
        if stripped.rstrip().endswith("```"):
            stripped = stripped.rstrip()[:-3]
    return stripped.strip()


def parse_operations(text: str) -> List[FileOperation]:
    """Decode the model's JSON answer.

    Raises:
        AgentError: when the answer is not the expected JSON shape.
    """
    try:
        data = json.loads(_strip_fences(text))
    except ValueError as exc:
        raise AgentError(f"model did not return valid JSON edits: {exc}") from exc
    ops = data.get("ops") if isinstance(data, dict) else None
    if not isinstance(ops, list):
        raise AgentError("model response is missing the 'ops' list")
    result: List[FileOperation] = []
    for op in ops:
        if not isinstance(op, dict) or not isinstance(op.get("path"), str):
            continue
        result.append(
            FileOperation(
                path=op["path"],
                updated_full_content=op.get("updated_full_content"),
                delete=bool(op.get("delete", False)),
                move_to=op.get("move_to") or None,
            )
        )
    return result


def _inside(root: Path, rel: str) -> Path:
    target = (root / rel).resolve()
    if target != root and root not in target.parents:
        raise AgentError(f"refusing to touch a path outside the project: {rel}")
    return target


def _diff(root: Path, op: FileOperation) -> str:
    path = root / op.path
    before = path.read_text(encoding="utf-8", errors="replace") if path.exists() else ""
    after = "" if op.delete else (op.updated_full_content or before)
    return "".join(
        difflib.unified_diff(
            before.splitlines(keepends=True),
            after.splitlines(keepends=True),
            fromfile=f"a/{op.path}",
            tofile=f"b/{op.move_to or op.path}",
        )
    )


def apply_operations(root: Path, ops: List[FileOperation]) -> int:
    """Write the operations to disk; returns the number of files touched."""
    root = root.resolve()
    touched = 0
    for op in ops:
        source = _inside(root, op.path)
        if op.delete:
            if source.exists():
                source.unlink()
                touched += 1
            continue
        target = _inside(root, op.move_to) if op.move_to else source
        content = op.updated_full_content
        if content is None and source.exists():
            content = source.read_text(encoding="utf-8")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content or "", encoding="utf-8")
        if op.move_to and source.exists() and source != target:
            source.unlink()
        touched += 1
    return touched


def _output_text(response: Dict[str, Any]) -> str:
    chunks = [
        message_text(item, sep="")
        for item in response.get("output") or []
        if isinstance(item, dict) and classify(item) == ItemKind.MESSAGE
    ]
    return "".join(chunks)


async def run_single_pass(
    prompt: str,
    config: EffectiveConfig,
    root_path: Path,
    console: Console,
    confirm: Callable[[str], Awaitable[bool]],
    client: Optional[ResponsesClient] = None,
) -> int:
    """Run one full-context edit; returns the number of files changed."""
    files = collect_files(root_path)
    console.print(f"[dim]Loaded {len(files)} files from {root_path}[/dim]")
    payload = {
        "model": config.model,
        "instructions": "\n\n".join(p for p in (_SYSTEM, config.instructions) if p),
        "input": [
            {
                "type": "message",
                "role": "user",
                "content": [{"type": "input_text", "text": _task_text(prompt, files)}],
            }
        ],
        "store": not config.disable_response_storage,
    }
    owns = client is None
    client = client or ResponsesClient(config.api_key, config.base_url or "https://api.openai.com/v1")
    try:
        with console.status("Thinking..."):
            response = await client.create_response(payload)
    finally:
        if owns:
            await client.close()

    ops = parse_operations(_output_text(response))
    if not ops:
        console.print("[yellow]No changes proposed.[/yellow]")
        return 0
    for op in ops:
        console.print(Syntax(_diff(root_path, op) or f"(no textual change) {op.path}", "diff"))
    if not await confirm(f"Apply {len(ops)} file operation(s)?"):
        console.print("[yellow]Changes discarded.[/yellow]")
        return 0
    touched = apply_operations(root_path, ops)
    console.print(f"[green]Applied changes to {touched} file(s).[/green]")
    return touched
