"""Static shell completion scripts."""

from __future__ import annotations

from ..exceptions import UsageError

__all__ = ["COMPLETION_SCRIPTS", "completion_script"]

COMPLETION_SCRIPTS = {
    "bash": """# bash completion for codex
_codex_completion() {
  local cur
  cur="${COMP_WORDS[COMP_CWORD]}"
  COMPREPLY=( $(compgen -o default -o filenames -- "${cur}") )
}
complete -F _codex_completion codex""",
    "zsh": """# zsh completion for codex
#compdef codex

_codex() {
  _arguments '*:filename:_files'
}
_codex""",
    "fish": """# fish completion for codex
complete -c codex -a '(__fish_complete_path)' -d 'file path'""",
}


def completion_script(shell: str = "bash") -> str:
    """Return the script for ``shell``.

    Raises:
        UsageError: for shells without a script.
    """
    try:
        return COMPLETION_SCRIPTS[shell]
    except KeyError:
        raise UsageError(f"Unsupported shell: {shell}") from None
