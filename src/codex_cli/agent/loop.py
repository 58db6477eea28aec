"""Agent turn loop.

Sends the conversation to the model, surfaces every produced item through
``on_item``, and asks ``get_command_confirmation`` before any tool call.
Command execution itself is delegated to an optional ``executor``; sandboxing
lives with whoever provides it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from ..config.models import ApprovalMode, EffectiveConfig
from .client import ResponsesClient
from .items import ItemKind, ResponseItem, classify
from .parsers import ToolCallDetails, parse_tool_call

__all__ = [
    "AgentLoop",
    "CommandConfirmation",
    "ExecResult",
    "ReviewDecision",
    "SHELL_TOOL",
]

logger = logging.getLogger(__name__)

MAX_TURNS = 50

SHELL_TOOL: Dict[str, Any] = {
    "type": "function",
    "name": "shell",
    "description": "Runs a shell command, and returns its output.",
    "strict": False,
    "parameters": {
        "type": "object",
        "properties": {
            "command": {"type": "array", "items": {"type": "string"}},
            "workdir": {"type": "string", "description": "The working directory."},
            "timeout": {"type": "number", "description": "Timeout in milliseconds."},
        },
        "required": ["command"],
        "additionalProperties": False,
    },
}

# Keys the API accepts on items we send back; anything else is local metadata.
_API_ITEM_KEYS = {
    "message": ("type", "role", "content"),
    "function_call": ("type", "call_id", "name", "arguments"),
    "function_call_output": ("type", "call_id", "output"),
}


class ReviewDecision(str, Enum):
    YES = "yes"
    ALWAYS = "always"
    # Decline the command and end the run once the current turn is recorded.
    NO_CONTINUE = "no-continue"
    # Decline the command and cancel immediately.
    NO_EXIT = "no-exit"
    EXPLAIN = "explain"


@dataclass(frozen=True)
class CommandConfirmation:
    review: ReviewDecision
    custom_deny_message: Optional[str] = None


@dataclass(frozen=True)
class ExecResult:
    output: str
    exit_code: int
    duration_seconds: float


ConfirmCallable = Callable[[List[str]], Awaitable[CommandConfirmation]]
ExecutorCallable = Callable[[ToolCallDetails, Sequence[str]], Awaitable[ExecResult]]


def _is_reasoning_model(model: str) -> bool:
    return model.startswith("o") or model.startswith("codex")


def _api_item(item: ResponseItem, keep_ids: bool) -> ResponseItem:
    keys = _API_ITEM_KEYS.get(str(item.get("type")))
    out = dict(item) if keys is None else {k: item[k] for k in keys if k in item}
    if not keep_ids:
        out.pop("id", None)
    elif "id" in item:
        out["id"] = item["id"]
    return out


def _output_item(call_id: str, output: str, metadata: Optional[Dict[str, Any]] = None) -> ResponseItem:
    item: ResponseItem = {"type": "function_call_output", "call_id": call_id, "output": output}
    if metadata:
        item["metadata"] = metadata
    return item


class AgentLoop:
    """Drive model turns until the model stops calling tools or the run is stopped."""

    def __init__(
        self,
        *,
        model: str,
        config: EffectiveConfig,
        instructions: str,
        provider: str,
        approval_policy: ApprovalMode,
        additional_writable_roots: Sequence[str],
        disable_response_storage: bool,
        on_item: Callable[[ResponseItem], None],
        on_loading: Callable[[bool], None],
        get_command_confirmation: ConfirmCallable,
        on_last_response_id: Callable[[str], None],
        executor: Optional[ExecutorCallable] = None,
        client: Optional[ResponsesClient] = None,
    ):
        self.model = model
        self.config = config
        self.instructions = instructions
        self.provider = provider
        self.approval_policy = approval_policy
        self.additional_writable_roots = tuple(additional_writable_roots)
        self.disable_response_storage = disable_response_storage
        self.on_item = on_item
        self.on_loading = on_loading
        self.get_command_confirmation = get_command_confirmation
        self.on_last_response_id = on_last_response_id
        self.executor = executor
        self._client = client
        self._canceled = False

    def cancel(self) -> None:
        self._canceled = True

    def _new_client(self) -> ResponsesClient:
        base_url = self.config.base_url or "https://api.openai.com/v1"
        return ResponsesClient(self.config.api_key, base_url)

    def _payload(self, items: List[ResponseItem], previous_response_id: str) -> Dict[str, Any]:
        store = not self.disable_response_storage
        payload: Dict[str, Any] = {
            "model": self.model,
            "instructions": self.instructions,
            "input": [
                _api_item(i, keep_ids=store)
                for i in items
                # Reasoning items can only be referenced from stored responses.
                if store or classify(i) != ItemKind.REASONING
            ],
            "tools": [SHELL_TOOL],
            "tool_choice": "auto",
            "parallel_tool_calls": False,
            "store": store,
        }
        if _is_reasoning_model(self.model):
            payload["reasoning"] = {
                "effort": self.config.reasoning_effort,
                "summary": "auto",
            }
        if self.config.flex_mode:
            payload["service_tier"] = "flex"
        if store and previous_response_id:
            payload["previous_response_id"] = previous_response_id
        return payload

    async def _handle_function_call(
        self, item: ResponseItem
    ) -> Tuple[Optional[ResponseItem], bool]:
        """Return ``(output_item, stop)`` for one tool call."""
        call_id = str(item.get("call_id") or item.get("id") or "")
        details = parse_tool_call(item)
        if details is None:
            logger.warning("unparseable tool call arguments: %r", item.get("arguments"))
            return _output_item(call_id, "invalid arguments for shell tool", {"exit_code": 1}), False

        confirmation = await self.get_command_confirmation(details.cmd)
        review = confirmation.review
        if review == ReviewDecision.NO_EXIT:
            self.cancel()
            return None, True
        if review not in (ReviewDecision.YES, ReviewDecision.ALWAYS):
            message = confirmation.custom_deny_message or "aborted: command declined by user"
            return _output_item(call_id, message, {"exit_code": 1}), True

        if self.executor is None:
            return (
                _output_item(call_id, "command execution is not available", {"exit_code": 1}),
                False,
            )
        result = await self.executor(details, self.additional_writable_roots)
        return (
            _output_item(
                call_id,
                result.output,
                {"exit_code": result.exit_code, "duration_seconds": result.duration_seconds},
            ),
            False,
        )

    async def run(self, input_items: List[ResponseItem], previous_response_id: str = "") -> None:
        """Run turns starting from ``input_items``."""
        self._canceled = False
        transcript: List[ResponseItem] = list(input_items)
        pending: List[ResponseItem] = list(input_items)
        last_id = previous_response_id
        client = self._client or self._new_client()
        owns_client = self._client is None
        try:
            for _turn in range(MAX_TURNS):
                if self._canceled:
                    break
                items = transcript if self.disable_response_storage else pending
                self.on_loading(True)
                try:
                    response = await client.create_response(self._payload(items, last_id))
                finally:
                    self.on_loading(False)
                response_id = str(response.get("id") or "")
                if response_id:
                    last_id = response_id
                    self.on_last_response_id(response_id)

                next_input: List[ResponseItem] = []
                stop = False
                for item in response.get("output") or []:
                    if self._canceled or not isinstance(item, dict):
                        break
                    self.on_item(item)
                    transcript.append(item)
                    if classify(item) != ItemKind.FUNCTION_CALL:
                        continue
                    result, stop = await self._handle_function_call(item)
                    if result is not None:
                        self.on_item(result)
                        transcript.append(result)
                        next_input.append(result)
                    if stop:
                        break
                if stop or not next_input:
                    break
                pending = next_input
            else:
                logger.warning("agent loop stopped after %d turns", MAX_TURNS)
        finally:
            if owns_client:
                await client.close()
        logger.debug("agent run finished; %d items in transcript", len(transcript))
