from __future__ import annotations

from io import StringIO
from typing import Any, Dict, List

from rich.console import Console


def make_console() -> Console:
    return Console(file=StringIO(), force_terminal=False, color_system=None, width=120)


def console_text(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


class FakeClient:
    """Stands in for ResponsesClient; replays canned responses in order."""

    def __init__(self, responses: List[Dict[str, Any]]):
        self.responses = list(responses)
        self.payloads: List[Dict[str, Any]] = []
        self.closed = False

    async def create_response(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.payloads.append(payload)
        return self.responses.pop(0) if self.responses else {"id": "", "output": []}

    async def close(self) -> None:
        self.closed = True
