"""
Append-only message log.

Entries are committed to the console exactly once, in order, preceded by the
session header. Nothing that has been printed is ever redrawn; the only
moving part of the screen is the thinking indicator, which lives outside
this log.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Union

from rich.console import Console, Group, RenderableType
from rich.padding import Padding
from rich.text import Text

from ..agent.items import ItemKind, ResponseItem, classify, is_empty_reasoning, item_key
from .header import HeaderInfo, render_header
from .response_item import render_response_item

__all__ = [
    "BatchEntry",
    "GroupedResponseItem",
    "HEADER",
    "Margins",
    "MessageHistory",
    "item_margins",
]

HEADER = "header"
INDENT = 4


@dataclass(frozen=True)
class GroupedResponseItem:
    label: str
    items: List[ResponseItem] = field(default_factory=list)


@dataclass(frozen=True)
class BatchEntry:
    """A single item or a labelled group, displayed together."""

    item: Optional[ResponseItem] = None
    group: Optional[GroupedResponseItem] = None


@dataclass(frozen=True)
class Margins:
    left: int
    top: int
    bottom: int


def item_margins(item: Mapping[str, Any]) -> Margins:
    role = item.get("role") if classify(item) == ItemKind.MESSAGE else None
    return Margins(
        left=0 if role in ("user", "assistant") else INDENT,
        top=0 if role == "user" else 1,
        bottom=1 if role == "assistant" else 0,
    )


StaticEntry = Union[str, BatchEntry]


class MessageHistory:
    """Static log of ``["header", *entries]``."""

    def __init__(self, console: Console, header: HeaderInfo, full_stdout: bool = False):
        self.console = console
        self.header = header
        self.full_stdout = full_stdout
        self._entries: List[BatchEntry] = []
        self._committed = 0

    @property
    def entries(self) -> List[BatchEntry]:
        return list(self._entries)

    def static_items(self) -> List[StaticEntry]:
        return [HEADER, *self._entries]

    def append(self, entry: Union[BatchEntry, ResponseItem]) -> None:
        if not isinstance(entry, BatchEntry):
            entry = BatchEntry(item=entry)
        self._entries.append(entry)

    def extend(self, items: Sequence[Union[BatchEntry, ResponseItem]]) -> None:
        for item in items:
            self.append(item)

    def render_item(self, item: ResponseItem) -> Optional[RenderableType]:
        """Padded renderable for one item; ``None`` for empty reasoning updates."""
        if is_empty_reasoning(item):
            return None
        m = item_margins(item)
        body = render_response_item(item, full_stdout=self.full_stdout)
        return Padding(body, (m.top, 0, m.bottom, m.left))

    def render_entry(self, entry: StaticEntry) -> Optional[RenderableType]:
        if entry == HEADER:
            return render_header(self.header)
        assert isinstance(entry, BatchEntry)
        if entry.group is not None:
            parts = [r for r in (self.render_item(i) for i in entry.group.items) if r is not None]
            label = Padding(Text(entry.group.label, style="bold"), (1, 0, 0, INDENT))
            return Group(label, *parts)
        if entry.item is not None:
            return self.render_item(entry.item)
        return None

    def entry_key(self, entry: StaticEntry, index: int) -> str:
        if entry == HEADER:
            return HEADER
        assert isinstance(entry, BatchEntry)
        if entry.item is not None:
            return item_key(entry.item, index)
        return f"group-{index}"

    def flush(self) -> List[str]:
        """Print entries not yet committed; returns the keys printed."""
        static = self.static_items()
        printed: List[str] = []
        for index in range(self._committed, len(static)):
            entry = static[index]
            renderable = self.render_entry(entry)
            if renderable is not None:
                self.console.print(renderable)
            printed.append(self.entry_key(entry, index))
        self._committed = len(static)
        return printed
