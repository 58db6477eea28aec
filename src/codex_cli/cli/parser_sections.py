"""Small helpers to add argparse groups for the CLI parser."""

from __future__ import annotations

import argparse

from ..config.models import REASONING_EFFORTS, ApprovalMode

__all__ = [
    "add_approval_args",
    "add_context_args",
    "add_dangerous_args",
    "add_experimental_args",
    "add_general_args",
    "add_model_args",
    "add_output_args",
    "add_session_args",
]


def add_general_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "input",
        nargs="*",
        help="Prompt, or 'completion <bash|zsh|fish>'",
    )
    parser.add_argument(
        "-h", "--help", action="store_true", help="Show usage and exit"
    )


def add_model_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Model")
    g.add_argument(
        "-m", "--model", help="Model to use for completions (default: codex-mini-latest)"
    )
    g.add_argument(
        "-p", "--provider", help="Provider to use for completions (default: openai)"
    )
    g.add_argument(
        "--reasoning",
        choices=list(REASONING_EFFORTS),
        help="Set the reasoning effort level (default: high)",
    )
    g.add_argument(
        "--flex-mode",
        action="store_true",
        help="Use flex processing (only supported with models o3 and o4-mini)",
    )
    g.add_argument(
        "--disable-response-storage",
        action="store_true",
        help="Disable server-side response storage (sends the full context with every request)",
    )


def add_session_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Session")
    g.add_argument(
        "-i",
        "--image",
        action="append",
        default=[],
        metavar="PATH",
        help="Path(s) to image files to include as input",
    )
    g.add_argument(
        "-v",
        "--view",
        metavar="ROLLOUT",
        help="Inspect a previously saved rollout instead of starting a session",
    )
    g.add_argument("--history", action="store_true", help="Browse previous sessions")
    g.add_argument("--login", action="store_true", help="Start a new sign in flow")
    g.add_argument("--free", action="store_true", help="Retry redeeming free credits")
    g.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Non-interactive mode that only prints the assistant's output",
    )
    g.add_argument(
        "-c",
        "--config",
        action="store_true",
        help="Open the instructions file in your editor",
    )


def add_approval_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Approval")
    g.add_argument(
        "-a",
        "--approval-mode",
        choices=[m.value for m in ApprovalMode],
        help="Override the approval policy",
    )
    g.add_argument(
        "--auto-edit",
        action="store_true",
        help="Automatically approve file edits; still prompt for commands",
    )
    g.add_argument(
        "--full-auto",
        action="store_true",
        help="Automatically approve edits and commands when executed in the sandbox",
    )
    g.add_argument(
        "-w",
        "--writable-root",
        action="append",
        default=[],
        metavar="PATH",
        help="Writable folder for sandbox in full-auto mode (repeatable)",
    )


def add_context_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Context")
    g.add_argument(
        "--no-project-doc",
        action="store_true",
        help="Do not automatically include the repository's AGENTS.md",
    )
    g.add_argument(
        "--project-doc",
        metavar="FILE",
        help="Include an additional markdown file as context",
    )


def add_output_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Output")
    g.add_argument(
        "--full-stdout",
        "--no-truncate",
        dest="full_stdout",
        action="store_true",
        help="Do not truncate stdout/stderr from command outputs",
    )
    g.add_argument(
        "--notify", action="store_true", help="Enable notifications for responses"
    )


def add_dangerous_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Dangerous options")
    g.add_argument(
        "--dangerously-auto-approve-everything",
        action="store_true",
        help=(
            "Skip all confirmation prompts and execute commands without sandboxing. "
            "Intended solely for ephemeral local testing."
        ),
    )


def add_experimental_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Experimental options")
    g.add_argument(
        "-f",
        "--full-context",
        action="store_true",
        help=(
            "Load the entire repository into context and apply a batch of edits "
            "in one go. Incompatible with all other flags, except for --model."
        ),
    )
