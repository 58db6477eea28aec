"""CLI parser builder for codex.

``create_parser()`` assembles argument groups via small helpers. Help is an
ordinary flag so the dispatcher decides its precedence; parse errors exit
with status 1.
"""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn, Optional, Sequence

from ..version import __version__
from .parser_sections import (
    add_approval_args,
    add_context_args,
    add_dangerous_args,
    add_experimental_args,
    add_general_args,
    add_model_args,
    add_output_args,
    add_session_args,
)

__all__ = ["CodexArgumentParser", "create_parser", "parse_args"]


def _epilog() -> str:
    return (
        "Examples:\n"
        '  codex "Write and run a python program that prints ASCII art"\n'
        '  codex -q "fix build issues"\n'
        "  codex completion bash\n"
    )


class CodexArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def create_parser() -> CodexArgumentParser:
    parser = CodexArgumentParser(
        prog="codex",
        usage=(
            "%(prog)s [options] <prompt>\n"
            "       %(prog)s completion <bash|zsh|fish>"
        ),
        description="Chat with a coding agent from your terminal.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_epilog(),
        add_help=False,
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    add_general_args(parser)
    add_model_args(parser)
    add_session_args(parser)
    add_approval_args(parser)
    add_context_args(parser)
    add_output_args(parser)
    add_dangerous_args(parser)
    add_experimental_args(parser)
    return parser


def parse_args(
    argv: Optional[Sequence[str]] = None,
    parser: Optional[argparse.ArgumentParser] = None,
) -> argparse.Namespace:
    """Parse ``argv``; options and prompt words may be interleaved."""
    parser = parser or create_parser()
    return parser.parse_intermixed_args(argv)
