from __future__ import annotations

import pytest

from codex_cli.cli.completion import COMPLETION_SCRIPTS, completion_script
from codex_cli.exceptions import UsageError


@pytest.mark.parametrize("shell", ["bash", "zsh", "fish"])
def test_known_shells_have_scripts(shell) -> None:
    script = completion_script(shell)
    assert script == COMPLETION_SCRIPTS[shell]
    assert "codex" in script


def test_default_shell_is_bash() -> None:
    assert completion_script().startswith("# bash completion for codex")


@pytest.mark.parametrize("shell", ["powershell", "tcsh", ""])
def test_unsupported_shell_message(shell) -> None:
    with pytest.raises(UsageError) as exc:
        completion_script(shell)
    assert str(exc.value) == f"Unsupported shell: {shell}"
    assert exc.value.exit_code == 1
