"""Approval policy resolution shared by quiet and interactive modes."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Iterable, List

from ..config.models import ApprovalMode

__all__ = ["bypasses_sandbox", "resolve_approval_policy", "resolve_writable_roots"]


def _wants_full_auto(args: argparse.Namespace) -> bool:
    return bool(getattr(args, "full_auto", False)) or (
        getattr(args, "approval_mode", None) == ApprovalMode.FULL_AUTO.value
    )


def resolve_approval_policy(args: argparse.Namespace, configured: Any = None) -> ApprovalMode:
    """Highest first: full-auto, auto-edit, the configured default, then suggest.

    ``--dangerously-auto-approve-everything`` does not change the policy; see
    :func:`bypasses_sandbox`.
    """
    if _wants_full_auto(args):
        return ApprovalMode.FULL_AUTO
    if getattr(args, "auto_edit", False) or (
        getattr(args, "approval_mode", None) == ApprovalMode.AUTO_EDIT.value
    ):
        return ApprovalMode.AUTO_EDIT
    return ApprovalMode.parse(configured) or ApprovalMode.SUGGEST


def bypasses_sandbox(args: argparse.Namespace) -> bool:
    """True when commands should run unsandboxed (dangerous flag without full-auto)."""
    return bool(getattr(args, "dangerously_auto_approve_everything", False)) and not _wants_full_auto(args)


def resolve_writable_roots(paths: Iterable[str]) -> List[str]:
    return [str(Path(p).expanduser().resolve()) for p in paths]
