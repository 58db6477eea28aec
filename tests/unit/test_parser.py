from __future__ import annotations

import pytest

from codex_cli.cli.parser import create_parser, parse_args


def test_aliases_and_repeatable_flags() -> None:
    args = parse_args(
        ["-m", "o3", "-p", "ollama", "-i", "a.png", "--image", "b.png", "-w", "/x", "-w", "/y", "do it"]
    )
    assert args.model == "o3"
    assert args.provider == "ollama"
    assert args.image == ["a.png", "b.png"]
    assert args.writable_root == ["/x", "/y"]
    assert args.input == ["do it"]


def test_positionals_may_follow_flags_in_any_order() -> None:
    args = parse_args(["completion", "-q", "zsh"])
    assert args.input == ["completion", "zsh"]
    assert args.quiet is True


def test_no_truncate_is_an_alias_for_full_stdout() -> None:
    assert parse_args(["--no-truncate"]).full_stdout is True
    assert parse_args([]).full_stdout is False


def test_help_is_a_plain_flag() -> None:
    args = parse_args(["-h", "completion"])
    assert args.help is True
    assert args.input == ["completion"]


@pytest.mark.parametrize(
    "argv",
    [
        ["--reasoning", "extreme"],
        ["--approval-mode", "yolo"],
        ["--unknown-flag"],
        ["--model"],
    ],
)
def test_invalid_flags_exit_with_status_one(argv, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        parse_args(argv)
    assert exc.value.code == 1
    assert "usage:" in capsys.readouterr().err


def test_version_exits_zero(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        parse_args(["--version"])
    assert exc.value.code == 0
    assert "codex" in capsys.readouterr().out


def test_reasoning_choices() -> None:
    for effort in ("low", "medium", "high"):
        assert parse_args(["--reasoning", effort]).reasoning == effort


def test_help_text_lists_groups() -> None:
    text = create_parser().format_help()
    assert "Dangerous options" in text
    assert "--dangerously-auto-approve-everything" in text
    assert "completion <bash|zsh|fish>" in text
