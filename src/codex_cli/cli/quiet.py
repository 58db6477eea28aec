"""Non-interactive quiet mode.

Runs one agent cycle and prints each produced item to stdout as soon as it
arrives so the output can be piped. Commands are approved only under
full-auto; anything else is declined and the run stops.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Callable, Optional, Sequence, TextIO

from ..agent.input import create_input_item
from ..agent.items import ItemKind, ResponseItem, classify, message_text
from ..agent.loop import AgentLoop, CommandConfirmation, ReviewDecision
from ..agent.parsers import parse_tool_call
from ..config.models import ApprovalMode, EffectiveConfig
from ..exceptions import UsageError
from ..tui.response_item import output_header

__all__ = ["QUIET_PROMPT_REQUIRED", "format_response_item", "quiet_confirmation", "run_quiet_mode"]

logger = logging.getLogger(__name__)

QUIET_PROMPT_REQUIRED = (
    'Quiet mode requires a prompt string, e.g.,: codex -q "Fix bug #123 in the foobar project"'
)

AgentFactory = Callable[..., AgentLoop]


def format_response_item(item: ResponseItem, pretty: bool = True) -> str:
    if not pretty:
        return json.dumps(item)
    kind = classify(item)
    if kind == ItemKind.MESSAGE:
        return f"{item.get('role')}: {message_text(item)}"
    if kind == ItemKind.FUNCTION_CALL:
        details = parse_tool_call(item)
        return f"$ {details.cmd_readable_text if details else item.get('name')}"
    if kind == ItemKind.FUNCTION_CALL_OUTPUT:
        return f"{output_header(item)}\n{item.get('output') or ''}"
    return json.dumps(item)


def quiet_confirmation(approval_policy: ApprovalMode):
    decision = (
        ReviewDecision.YES
        if approval_policy == ApprovalMode.FULL_AUTO
        else ReviewDecision.NO_CONTINUE
    )

    async def _confirm(_command) -> CommandConfirmation:
        return CommandConfirmation(decision)

    return _confirm


async def run_quiet_mode(
    prompt: str,
    image_paths: Sequence[str],
    approval_policy: ApprovalMode,
    additional_writable_roots: Sequence[str],
    config: EffectiveConfig,
    *,
    agent_factory: AgentFactory = AgentLoop,
    out: Optional[TextIO] = None,
) -> None:
    """Run one agent cycle for ``prompt``.

    Raises:
        UsageError: when the prompt is empty; the agent is never built.
    """
    if not prompt or not prompt.strip():
        raise UsageError(QUIET_PROMPT_REQUIRED)
    stream = out or sys.stdout

    def on_item(item: ResponseItem) -> None:
        stream.write(format_response_item(item, pretty=config.pretty_print) + "\n")
        stream.flush()

    agent = agent_factory(
        model=config.model,
        config=config,
        instructions=config.instructions,
        provider=config.provider,
        approval_policy=approval_policy,
        additional_writable_roots=list(additional_writable_roots),
        disable_response_storage=config.disable_response_storage,
        on_item=on_item,
        on_loading=lambda _loading: None,
        get_command_confirmation=quiet_confirmation(approval_policy),
        on_last_response_id=lambda _rid: None,
    )
    input_item = create_input_item(prompt, image_paths)
    logger.debug("quiet mode run: policy=%s", approval_policy.value)
    await agent.run([input_item])
