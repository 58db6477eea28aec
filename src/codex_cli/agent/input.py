"""Build user input items from a prompt and optional image files."""

from __future__ import annotations

import base64
import mimetypes
from pathlib import Path
from typing import Iterable

from ..exceptions import UsageError
from .items import ResponseItem

__all__ = ["create_input_item"]


def _image_part(path: Path) -> dict:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise UsageError(f"cannot read image {path}: {exc}")
    mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    encoded = base64.b64encode(data).decode("ascii")
    return {
        "type": "input_image",
        "detail": "auto",
        "image_url": f"data:{mime};base64,{encoded}",
    }


def create_input_item(prompt: str, image_paths: Iterable[str] = ()) -> ResponseItem:
    """One user message holding the prompt text followed by each image."""
    content = [{"type": "input_text", "text": prompt}]
    for raw in image_paths:
        content.append(_image_part(Path(raw).expanduser()))
    return {"role": "user", "type": "message", "content": content}
