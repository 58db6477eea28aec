from __future__ import annotations

from argparse import Namespace
from io import StringIO

from rich.console import Console

from codex_cli.cli.dispatch import prompt_from_args
from codex_cli.cli.main import report_error
from codex_cli.exceptions import CodexError, MissingApiKeyError, RolloutError


def _console() -> Console:
    return Console(file=StringIO(), force_terminal=False, color_system=None, width=200)


def test_report_missing_key_names_the_variable() -> None:
    err = _console()
    report_error(
        err,
        MissingApiKeyError("gemini", "GEMINI_API_KEY", "You can create a GEMINI_API_KEY in the Google AI Studio."),
    )
    lines = [line for line in err.file.getvalue().splitlines() if line]
    assert lines == [
        "Missing gemini API key.",
        "Set the environment variable GEMINI_API_KEY and re-run this command.",
        "You can create a GEMINI_API_KEY in the Google AI Studio.",
    ]


def test_report_plain_errors_verbatim() -> None:
    err = _console()
    report_error(err, RolloutError("[bad] path"))
    assert err.file.getvalue().strip() == "[bad] path"


def test_every_error_exits_with_one() -> None:
    assert CodexError.exit_code == 1
    assert MissingApiKeyError("x", "X_API_KEY").exit_code == 1


def test_prompt_joins_positionals() -> None:
    assert prompt_from_args(Namespace(input=["fix", "the", "bug"])) == "fix the bug"
    assert prompt_from_args(Namespace(input=[])) == ""
