from __future__ import annotations

from argparse import Namespace

import pytest
import yaml

from codex_cli.config.defaults import PROJECT_DOC_MAX_BYTES, PROJECT_DOC_SEPARATOR
from codex_cli.config.loader import (
    bootstrap_config_dir,
    build_effective_config,
    discover_project_doc,
    load_config,
    load_file_config,
    merge_config,
)
from codex_cli.config.models import ApprovalMode, EffectiveConfig
from codex_cli.exceptions import ConfigError


def _args(**kw) -> Namespace:
    base = dict(
        model=None,
        provider=None,
        approval_mode=None,
        notify=False,
        reasoning=None,
        flex_mode=False,
        disable_response_storage=False,
        full_stdout=False,
        quiet=False,
        project_doc=None,
        no_project_doc=False,
    )
    base.update(kw)
    return Namespace(**base)


def test_merge_precedence() -> None:
    merged = merge_config(
        cli_args={"model": "cli", "provider": None},
        env_config={"model": "env", "notify": True},
        dotenv_config={"model": "dotenv", "provider": "dotenv"},
        file_config={"model": "file", "provider": "file", "approval_mode": "auto-edit"},
        defaults={"model": "default", "provider": "openai", "approval_mode": None, "notify": False},
    )
    assert merged == {
        "model": "cli",
        "provider": "dotenv",
        "approval_mode": "auto-edit",
        "notify": True,
    }


def test_file_config_accepts_legacy_keys(tmp_path) -> None:
    (tmp_path / "config.yaml").write_text(
        yaml.safe_dump({"model": "o3", "approvalMode": "full-auto", "flexMode": True}),
        encoding="utf-8",
    )
    data = load_file_config(tmp_path)
    assert data["approval_mode"] == "full-auto"
    assert data["flex_mode"] is True


def test_broken_file_config_is_ignored(tmp_path) -> None:
    (tmp_path / "config.yaml").write_text("model: [unclosed", encoding="utf-8")
    assert load_file_config(tmp_path) == {}


def test_json_config_is_accepted(tmp_path) -> None:
    (tmp_path / "config.json").write_text('{"model": "gpt-4.1"}', encoding="utf-8")
    assert load_file_config(tmp_path)["model"] == "gpt-4.1"


def test_load_config_combines_instructions_and_project_doc(tmp_path, monkeypatch) -> None:
    home = tmp_path / "home"
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    (repo / "pkg").mkdir()
    (repo / "AGENTS.md").write_text("project rules", encoding="utf-8")
    bootstrap_config_dir(home)
    (home / "instructions.md").write_text("be brief", encoding="utf-8")
    monkeypatch.setenv("PRETTY_PRINT", "0")

    merged = load_config(_args(model="o3", provider="Gemini"), cwd=repo / "pkg", base=home,
                         dotenv_path=tmp_path / "missing.env")
    assert merged["model"] == "o3"
    assert merged["provider"] == "gemini"
    assert merged["pretty_print"] is False
    assert merged["instructions"] == f"be brief{PROJECT_DOC_SEPARATOR}project rules"

    no_doc = load_config(_args(no_project_doc=True), cwd=repo, base=home,
                         dotenv_path=tmp_path / "missing.env")
    assert no_doc["instructions"] == "be brief"


def test_missing_explicit_project_doc_fails(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_config(_args(project_doc="nope.md"), cwd=tmp_path, base=tmp_path,
                    dotenv_path=tmp_path / "missing.env")


def test_project_doc_search_stops_outside_git(tmp_path) -> None:
    (tmp_path / "AGENTS.md").write_text("x", encoding="utf-8")
    child = tmp_path / "child"
    child.mkdir()
    assert discover_project_doc(child) is None
    assert discover_project_doc(tmp_path) == (tmp_path / "AGENTS.md").resolve()


def test_large_project_doc_is_truncated(tmp_path) -> None:
    (tmp_path / ".git").mkdir()
    (tmp_path / "AGENTS.md").write_text("a" * (PROJECT_DOC_MAX_BYTES + 100), encoding="utf-8")
    merged = load_config(_args(), cwd=tmp_path, base=tmp_path / "home",
                         dotenv_path=tmp_path / "missing.env")
    assert len(merged["instructions"]) == PROJECT_DOC_MAX_BYTES


def test_dotenv_quiet_mode(tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("CODEX_QUIET_MODE=1\n", encoding="utf-8")
    merged = load_config(_args(), cwd=tmp_path, base=tmp_path / "home", dotenv_path=env_file)
    assert merged["quiet"] is True


def test_effective_config_threads_key_and_is_frozen() -> None:
    cfg = build_effective_config(
        {"model": "o3", "provider": "openai", "approval_mode": "auto-edit", "reasoning_effort": "LOW"},
        api_key="sk-1",
        base_url="https://example.test/v1",
    )
    assert cfg.api_key == "sk-1"
    assert cfg.approval_mode == ApprovalMode.AUTO_EDIT
    assert cfg.reasoning_effort == "low"
    assert cfg.to_dict()["api_key"] == "[REDACTED]"
    with pytest.raises(Exception):
        cfg.model = "other"  # type: ignore[misc]


def test_only_late_patchable_fields_can_change() -> None:
    cfg = EffectiveConfig(model="a")
    assert cfg.with_overrides(model="b", api_key="k").model == "b"
    with pytest.raises(TypeError):
        cfg.with_overrides(notify=True)


def test_bootstrap_creates_files_once(tmp_path) -> None:
    path = bootstrap_config_dir(tmp_path / "cfg")
    assert path.exists()
    (tmp_path / "cfg" / "config.yaml").write_text("model: keep\n", encoding="utf-8")
    bootstrap_config_dir(tmp_path / "cfg")
    assert "keep" in (tmp_path / "cfg" / "config.yaml").read_text(encoding="utf-8")
