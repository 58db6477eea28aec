"""
Interactive chat session.

Each user prompt is handed to the agent loop; produced items are appended to
the static log and flushed immediately. Command confirmations are asked
inline unless the approval policy is full-auto.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from rich.console import Console
from rich.prompt import Prompt

from ..agent.input import create_input_item
from ..agent.items import ItemKind, ResponseItem, classify
from ..agent.loop import AgentLoop, CommandConfirmation, ReviewDecision
from ..agent.rollout import rollout_items, save_rollout
from ..config.models import ApprovalMode, EffectiveConfig
from ..utils.terminal import run_prompt
from .header import HeaderInfo
from .history import MessageHistory
from .status import ThinkingIndicator

__all__ = ["EXIT_COMMANDS", "TerminalChatApp"]

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"q", "exit", "quit", "/exit", "/quit"}
HELP_TEXT = (
    "[bold]Commands[/bold]\n"
    "  /help   show this help\n"
    "  /clear  start a new conversation\n"
    "  /exit   quit (also q, exit)"
)

AskFn = Callable[..., str]
AgentFactory = Callable[..., AgentLoop]


class TerminalChatApp:
    """Long-lived chat UI driven by :class:`AgentLoop`."""

    def __init__(
        self,
        console: Console,
        config: EffectiveConfig,
        approval_policy: ApprovalMode,
        additional_writable_roots: Sequence[str] = (),
        *,
        prompt: Optional[str] = None,
        image_paths: Sequence[str] = (),
        rollout: Optional[Dict[str, Any]] = None,
        full_stdout: bool = False,
        config_dir: Optional[Path] = None,
        ask: AskFn = Prompt.ask,
        agent_factory: AgentFactory = AgentLoop,
    ):
        self.console = console
        self.config = config
        self.approval_policy = approval_policy
        self.additional_writable_roots = list(additional_writable_roots)
        self.initial_prompt = prompt
        self.image_paths = list(image_paths)
        self.config_dir = config_dir
        self.ask = ask
        self.agent_factory = agent_factory

        self.session_id = uuid.uuid4().hex
        self.started_at = datetime.now(timezone.utc)
        self.items: List[ResponseItem] = rollout_items(rollout) if rollout else []
        self.last_response_id = ""
        self._always_approved: set[str] = set()
        self.indicator = ThinkingIndicator(console)
        self.history = MessageHistory(
            console,
            HeaderInfo(
                model=config.model,
                provider=config.provider,
                approval_policy=approval_policy.value,
                cwd=str(Path.cwd()),
                session_id=self.session_id,
                flex_mode=config.flex_mode,
            ),
            full_stdout=full_stdout,
        )
        self.history.extend(self.items)
        self.agent = self._build_agent()

    def _build_agent(self) -> AgentLoop:
        return self.agent_factory(
            model=self.config.model,
            config=self.config,
            instructions=self.config.instructions,
            provider=self.config.provider,
            approval_policy=self.approval_policy,
            additional_writable_roots=self.additional_writable_roots,
            disable_response_storage=self.config.disable_response_storage,
            on_item=self._on_item,
            on_loading=self.indicator.set_loading,
            get_command_confirmation=self._confirm_command,
            on_last_response_id=self._on_last_response_id,
        )

    def _on_item(self, item: ResponseItem) -> None:
        self.items.append(item)
        self.history.append(item)
        self.history.flush()
        if (
            self.config.notify
            and classify(item) == ItemKind.MESSAGE
            and item.get("role") == "assistant"
        ):
            self.console.bell()

    def _on_last_response_id(self, response_id: str) -> None:
        self.last_response_id = response_id

    async def _ask(self, *args: Any, **kwargs: Any) -> str:
        return await run_prompt(self.ask, *args, console=self.console, **kwargs)

    async def _confirm_command(self, command: List[str]) -> CommandConfirmation:
        if self.approval_policy == ApprovalMode.FULL_AUTO:
            return CommandConfirmation(ReviewDecision.YES)
        key = " ".join(command)
        if key in self._always_approved:
            return CommandConfirmation(ReviewDecision.YES)
        self.indicator.stop()
        answer = await self._ask(
            "Allow command? [y]es / [a]lways / [n]o / [q]uit",
            choices=["y", "a", "n", "q"],
            default="y",
        )
        if answer == "a":
            self._always_approved.add(key)
            return CommandConfirmation(ReviewDecision.ALWAYS)
        if answer == "y":
            return CommandConfirmation(ReviewDecision.YES)
        if answer == "q":
            return CommandConfirmation(ReviewDecision.NO_EXIT)
        reason = await self._ask("Tell the model what to do instead (optional)", default="")
        return CommandConfirmation(ReviewDecision.NO_CONTINUE, reason.strip() or None)

    async def _submit(self, text: str, image_paths: Sequence[str] = ()) -> None:
        item = create_input_item(text, image_paths)
        self._on_item(item)
        # Without server-side storage the model sees only what is sent.
        input_items = list(self.items) if self.config.disable_response_storage else [item]
        try:
            await self.agent.run(input_items, self.last_response_id)
        finally:
            self.indicator.stop()

    def _reset(self) -> None:
        self.last_response_id = ""
        self.items.clear()
        self.console.print("[dim]Started a new conversation.[/dim]")

    def _save(self) -> Optional[Path]:
        if not self.items:
            return None
        return save_rollout(
            self.session_id,
            self.items,
            self.config.instructions,
            base=self.config_dir,
            started_at=self.started_at,
        )

    async def run(self) -> int:
        self.history.flush()
        try:
            if self.initial_prompt and self.initial_prompt.strip():
                await self._submit(self.initial_prompt, self.image_paths)
            while True:
                text = await self._ask("[bold cyan]user[/bold cyan]", default="")
                command = text.strip()
                if not command:
                    continue
                if command.lower() in EXIT_COMMANDS:
                    break
                if command == "/help":
                    self.console.print(HELP_TEXT)
                    continue
                if command == "/clear":
                    self._reset()
                    continue
                await self._submit(text)
        except (EOFError, KeyboardInterrupt):
            logger.debug("input closed; leaving chat")
        finally:
            self.indicator.stop()
            saved = self._save()
            if saved is not None:
                logger.info("session saved to %s", saved)
        return 0
