from __future__ import annotations

import pytest


@pytest.fixture
def codex_home(tmp_path, monkeypatch):
    home = tmp_path / "codex-home"
    home.mkdir()
    monkeypatch.setenv("CODEX_HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "OPENAI_API_KEY",
        "OPENAI_BASE_URL",
        "CODEX_QUIET_MODE",
        "PRETTY_PRINT",
        "CODEX_RUST",
        "DEBUG",
        "EDITOR",
    ):
        monkeypatch.delenv(name, raising=False)
