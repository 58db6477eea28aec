from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pytest

from _fakes import console_text, make_console
from codex_cli.cli import dispatch as dispatch_mod
from codex_cli.cli import main as main_mod
from codex_cli.cli.parser import create_parser, parse_args
from codex_cli.config.models import ApprovalMode
from codex_cli.exceptions import UsageError
from codex_cli.tui.sessions import SessionSelection


@pytest.fixture
def env(codex_home, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    async def no_update(*_a, **_k):
        return None

    monkeypatch.setattr(dispatch_mod, "check_for_updates", no_update)
    monkeypatch.setattr(dispatch_mod, "_login_callable", lambda *_a: None)
    monkeypatch.setattr(main_mod, "install_exit_handlers", lambda *_a: None)
    return codex_home


@pytest.fixture
def quiet_calls(monkeypatch):
    calls: Dict[str, Any] = {}

    async def fake_quiet(prompt, images, policy, roots, config):
        calls.update(prompt=prompt, images=images, policy=policy, roots=roots, config=config)

    monkeypatch.setattr(dispatch_mod, "run_quiet_mode", fake_quiet)
    return calls


async def _run(argv, console=None, err=None) -> int:
    parser = create_parser()
    args = parse_args(argv, parser)
    return await dispatch_mod.dispatch(
        console or make_console(), args, parser, err_console=err or make_console()
    )


@pytest.mark.asyncio
async def test_completion_runs_before_anything_else(env, capsys) -> None:
    assert await _run(["completion", "--help", "--config"]) == 0
    assert capsys.readouterr().out.startswith("# bash completion for codex")


@pytest.mark.asyncio
async def test_unsupported_shell_raises_usage_error(env) -> None:
    with pytest.raises(UsageError, match="Unsupported shell: tcsh"):
        await _run(["completion", "tcsh"])


@pytest.mark.asyncio
async def test_help_wins_over_config(env, capsys, monkeypatch) -> None:
    monkeypatch.setattr(dispatch_mod, "edit_instructions", lambda *_a: pytest.fail("editor opened"))
    assert await _run(["--help", "--config"]) == 0
    assert "usage:" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_config_opens_editor_on_instructions(env, monkeypatch) -> None:
    seen = []
    monkeypatch.setattr(dispatch_mod, "edit_instructions", lambda base: seen.append(base) or 0)
    assert await _run(["--config"]) == 0
    assert seen == [env]


@pytest.mark.asyncio
async def test_view_with_invalid_json_exits_one(env, tmp_path) -> None:
    (tmp_path / "rollout.json").write_text("{ not json", encoding="utf-8")
    err = make_console()
    assert await _run(["--view", "rollout.json"], err=err) == 1
    assert console_text(err).startswith("Error reading rollout file:")


@pytest.mark.asyncio
async def test_view_renders_and_exits_zero(env, tmp_path) -> None:
    (tmp_path / "rollout.json").write_text(
        '{"session": {"id": "s"}, "items": [{"type": "message", "role": "user",'
        ' "content": [{"type": "input_text", "text": "old prompt"}]}]}',
        encoding="utf-8",
    )
    console = make_console()
    assert await _run(["-v", "rollout.json"], console=console) == 0
    assert "old prompt" in console_text(console)


@pytest.mark.asyncio
async def test_quiet_uses_resolved_policy_and_key(env, quiet_calls, tmp_path) -> None:
    rc = await _run(["-q", "list files", "--auto-edit", "-w", "out", "-i", "x.png"])
    assert rc == 0
    assert quiet_calls["prompt"] == "list files"
    assert quiet_calls["policy"] == ApprovalMode.AUTO_EDIT
    assert quiet_calls["roots"] == [str((tmp_path / "out").resolve())]
    assert quiet_calls["images"] == ["x.png"]
    assert quiet_calls["config"].api_key == "sk-test"


@pytest.mark.asyncio
async def test_quiet_mode_from_environment(env, quiet_calls, monkeypatch) -> None:
    monkeypatch.setenv("CODEX_QUIET_MODE", "1")
    assert await _run(["hello"]) == 0
    assert quiet_calls["prompt"] == "hello"


@pytest.mark.asyncio
async def test_flex_mode_flag_with_unsupported_model_fails(env, quiet_calls) -> None:
    with pytest.raises(UsageError, match="only supported"):
        await _run(["-q", "x", "--flex-mode", "-m", "gpt-4.1"])
    assert quiet_calls == {}


@pytest.mark.asyncio
async def test_flex_mode_from_config_is_silently_disabled(env, quiet_calls) -> None:
    (env / "config.yaml").write_text("model: gpt-4.1\nflex_mode: true\n", encoding="utf-8")
    assert await _run(["-q", "x"]) == 0
    assert quiet_calls["config"].flex_mode is False
    assert await _run(["-q", "x", "-m", "o3"]) == 0
    assert quiet_calls["config"].flex_mode is True


@pytest.mark.asyncio
async def test_history_resume_seeds_prompt(env, quiet_calls, monkeypatch) -> None:
    session = Path("/sessions/rollout-1.json")
    monkeypatch.setattr(
        dispatch_mod, "select_session", lambda *_a, **_k: SessionSelection(session, "resume")
    )
    assert await _run(["--history", "-q"]) == 0
    assert quiet_calls["prompt"] == f"Resume this session: {session}"


@pytest.mark.asyncio
async def test_history_cancel_and_view_error(env, tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(dispatch_mod, "select_session", lambda *_a, **_k: None)
    assert await _run(["--history"]) == 0

    bad = tmp_path / "bad.json"
    bad.write_text("nope", encoding="utf-8")
    monkeypatch.setattr(dispatch_mod, "select_session", lambda *_a, **_k: SessionSelection(bad, "view"))
    err = make_console()
    assert await _run(["--history"], err=err) == 1
    assert console_text(err).startswith("Error reading session file:")


@pytest.mark.asyncio
async def test_interactive_is_the_default(env, monkeypatch) -> None:
    created = {}

    class FakeApp:
        def __init__(self, console, config, policy, roots, **kwargs):
            created.update(config=config, policy=policy, kwargs=kwargs)

        async def run(self) -> int:
            return 0

    monkeypatch.setattr(dispatch_mod, "TerminalChatApp", FakeApp)
    assert await _run(["fix", "it", "--full-auto", "--dangerously-auto-approve-everything"]) == 0
    assert created["policy"] == ApprovalMode.FULL_AUTO
    assert created["kwargs"]["prompt"] == "fix it"


def test_main_reports_missing_key(env, monkeypatch, capsys) -> None:
    monkeypatch.delenv("OPENAI_API_KEY")
    with pytest.raises(SystemExit) as exc:
        main_mod.main(["-q", "hello"])
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert "Missing openai API key." in err
    assert "OPENAI_API_KEY" in err


def test_main_quiet_without_prompt_exits_one(env, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main_mod.main(["-q", "   "])
    assert exc.value.code == 1
    assert "Quiet mode requires a prompt" in capsys.readouterr().err


def test_main_unsupported_shell(env, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main_mod.main(["completion", "tcsh"])
    assert exc.value.code == 1
    assert "Unsupported shell: tcsh" in capsys.readouterr().err
