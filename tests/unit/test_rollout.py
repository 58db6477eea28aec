from __future__ import annotations

from datetime import datetime, timezone

import pytest

from _fakes import console_text, make_console
from codex_cli.agent.rollout import (
    list_sessions,
    load_rollout,
    resolve_rollout_path,
    save_rollout,
)
from codex_cli.exceptions import RolloutError
from codex_cli.tui.sessions import select_session
from codex_cli.tui.viewer import render_rollout

ITEMS = [
    {"id": "u", "type": "message", "role": "user", "content": [{"type": "input_text", "text": "fix the bug"}]},
    {"id": "c", "type": "function_call", "name": "shell", "arguments": '{"command": ["ls"]}'},
    {"id": "a", "type": "message", "role": "assistant", "content": [{"type": "output_text", "text": "done"}]},
]


def test_save_and_list_sessions_newest_first(tmp_path) -> None:
    early = datetime(2025, 1, 1, tzinfo=timezone.utc)
    late = datetime(2025, 2, 1, tzinfo=timezone.utc)
    save_rollout("one", ITEMS, "i", base=tmp_path, started_at=early)
    save_rollout("two", ITEMS[:1], base=tmp_path, started_at=late)
    (tmp_path / "sessions" / "rollout-junk.json").write_text("{", encoding="utf-8")
    sessions = list_sessions(tmp_path)
    assert [s.session_id for s in sessions] == ["two", "one"]
    assert sessions[1].user_messages == 1
    assert sessions[1].tool_calls == 1
    assert sessions[1].first_message == "fix the bug"


def test_load_rollout_errors(tmp_path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{nope", encoding="utf-8")
    with pytest.raises(RolloutError):
        load_rollout(bad)
    with pytest.raises(RolloutError):
        load_rollout(tmp_path / "missing.json")
    listing = tmp_path / "list.json"
    listing.write_text("[]", encoding="utf-8")
    with pytest.raises(RolloutError):
        load_rollout(listing)


def test_relative_paths_resolve_against_cwd(tmp_path) -> None:
    assert resolve_rollout_path("r.json", tmp_path) == tmp_path / "r.json"
    assert resolve_rollout_path(str(tmp_path / "abs.json")) == tmp_path / "abs.json"


def test_viewer_renders_header_and_items(tmp_path) -> None:
    path = save_rollout("sess", ITEMS, base=tmp_path)
    console = make_console()
    count = render_rollout(console, load_rollout(path), "o3", "openai")
    text = console_text(console)
    assert count == 3
    assert text.index("Codex") < text.index("fix the bug") < text.index("$ ls") < text.index("done")


def test_session_browser_view_resume_cancel(tmp_path) -> None:
    save_rollout("s1", ITEMS, base=tmp_path)
    sessions = list_sessions(tmp_path)

    def asker(*answers):
        queue = list(answers)
        return lambda *_a, **_k: queue.pop(0)

    view = select_session(make_console(), sessions, ask=asker("1", "v"))
    assert view is not None and view.mode == "view" and view.path == sessions[0].path
    resume = select_session(make_console(), sessions, ask=asker("1", "r"))
    assert resume is not None and resume.mode == "resume"
    assert select_session(make_console(), sessions, ask=asker("q")) is None
    console = make_console()
    assert select_session(console, [], ask=asker()) is None
    assert "No saved sessions" in console_text(console)


def test_session_browser_lists_sessions_and_cancels_on_action(tmp_path) -> None:
    save_rollout("s1", ITEMS, base=tmp_path)
    sessions = list_sessions(tmp_path)
    console = make_console()
    prompts = []

    def ask(prompt, **kwargs):
        prompts.append((prompt, kwargs["choices"]))
        return "1" if len(prompts) == 1 else "q"

    assert select_session(console, sessions, ask=ask) is None
    assert prompts[0][1] == ["1", "q"]
    assert prompts[1][1] == ["v", "r", "q"]
    assert "fix the bug" in console_text(console)
