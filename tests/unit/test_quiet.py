from __future__ import annotations

import json
from io import StringIO

import pytest

from _fakes import FakeClient
from codex_cli.agent.loop import AgentLoop, ReviewDecision
from codex_cli.cli.quiet import format_response_item, quiet_confirmation, run_quiet_mode
from codex_cli.config.models import ApprovalMode, EffectiveConfig
from codex_cli.exceptions import UsageError


def test_message_formatting_joins_parts() -> None:
    item = {
        "type": "message",
        "role": "user",
        "content": [
            {"type": "input_text", "text": "look"},
            {"type": "input_image", "image_url": "data:"},
            {"type": "input_file", "filename": "a.txt"},
            {"type": "refusal", "refusal": "no"},
            {"type": "mystery"},
        ],
    }
    assert format_response_item(item) == "user: look <Image> a.txt no ?"


def test_function_call_uses_readable_command() -> None:
    item = {
        "type": "function_call",
        "name": "shell",
        "arguments": json.dumps({"command": ["bash", "-lc", "ls -la"]}),
    }
    assert format_response_item(item) == "$ ls -la"


def test_function_call_falls_back_to_name() -> None:
    item = {"type": "function_call", "name": "shell", "arguments": "{broken"}
    assert format_response_item(item) == "$ shell"


def test_function_call_output_with_and_without_metadata() -> None:
    item = {
        "type": "function_call_output",
        "call_id": "c1",
        "output": "hello",
        "metadata": {"exit_code": 0, "duration_seconds": 1.5},
    }
    assert format_response_item(item) == "command.stdout (code: 0, duration: 1.5s)\nhello"
    bare = {"type": "function_call_output", "call_id": "c1", "output": "hi"}
    assert format_response_item(bare) == "command.stdout\nhi"


def test_other_items_and_raw_mode_dump_json() -> None:
    item = {"type": "reasoning", "summary": []}
    assert json.loads(format_response_item(item)) == item
    msg = {"type": "message", "role": "assistant", "content": []}
    assert json.loads(format_response_item(msg, pretty=False)) == msg


@pytest.mark.asyncio
async def test_confirmation_is_yes_only_for_full_auto() -> None:
    assert (await quiet_confirmation(ApprovalMode.FULL_AUTO)(["ls"])).review == ReviewDecision.YES
    for mode in (ApprovalMode.SUGGEST, ApprovalMode.AUTO_EDIT):
        assert (await quiet_confirmation(mode)(["ls"])).review == ReviewDecision.NO_CONTINUE


@pytest.mark.asyncio
@pytest.mark.parametrize("prompt", ["", "   ", "\n\t"])
async def test_empty_prompt_never_builds_agent(prompt) -> None:
    def factory(**_kw):
        raise AssertionError("agent must not be constructed")

    with pytest.raises(UsageError):
        await run_quiet_mode(
            prompt, [], ApprovalMode.SUGGEST, [], EffectiveConfig(model="m"), agent_factory=factory
        )


@pytest.mark.asyncio
async def test_declined_commands_never_execute() -> None:
    executed = []

    async def executor(details, roots):
        executed.append(details.cmd)

    call = {
        "type": "function_call",
        "id": "fc1",
        "call_id": "call-1",
        "name": "shell",
        "arguments": json.dumps({"command": ["ls"]}),
    }
    client = FakeClient(
        [
            {"id": "r1", "output": [call]},
            {"id": "r2", "output": [{"type": "message", "role": "assistant", "content": []}]},
        ]
    )

    def factory(**kwargs):
        return AgentLoop(**kwargs, executor=executor, client=client)

    out = StringIO()
    await run_quiet_mode(
        "list files",
        [],
        ApprovalMode.SUGGEST,
        [],
        EffectiveConfig(model="codex-mini-latest"),
        agent_factory=factory,
        out=out,
    )
    lines = out.getvalue().splitlines()
    assert lines[0] == "$ ls"
    assert lines[1] == "command.stdout (code: 1)"
    assert executed == []
    assert len(client.payloads) == 1


@pytest.mark.asyncio
async def test_full_auto_runs_commands() -> None:
    from codex_cli.agent.loop import ExecResult

    executed = []

    async def executor(details, roots):
        executed.append(details.cmd)
        return ExecResult(output="a\nb", exit_code=0, duration_seconds=0.1)

    call = {
        "type": "function_call",
        "call_id": "call-1",
        "name": "shell",
        "arguments": json.dumps({"command": ["ls"]}),
    }
    client = FakeClient([{"id": "r1", "output": [call]}, {"id": "r2", "output": []}])
    out = StringIO()
    await run_quiet_mode(
        "list files",
        [],
        ApprovalMode.FULL_AUTO,
        [],
        EffectiveConfig(model="o3"),
        agent_factory=lambda **kw: AgentLoop(**kw, executor=executor, client=client),
        out=out,
    )
    assert executed == [["ls"]]
    assert "command.stdout (code: 0, duration: 0.1s)\na\nb" in out.getvalue()


@pytest.mark.asyncio
async def test_dangerous_flag_does_not_auto_approve_in_quiet_mode() -> None:
    from argparse import Namespace

    from codex_cli.cli.approval import resolve_approval_policy

    args = Namespace(
        full_auto=False,
        auto_edit=True,
        approval_mode=None,
        dangerously_auto_approve_everything=True,
    )
    policy = resolve_approval_policy(args)
    decision = await quiet_confirmation(policy)(["rm", "-rf", "/"])
    assert decision.review == ReviewDecision.NO_CONTINUE


def test_output_without_text_and_whole_second_durations() -> None:
    item = {
        "type": "function_call_output",
        "call_id": "c1",
        "output": None,
        "metadata": {"exit_code": 0, "duration_seconds": 1.0},
    }
    assert format_response_item(item) == "command.stdout (code: 0, duration: 1s)\n"
