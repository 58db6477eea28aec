"""Opt-in delegation to a prebuilt native executable (``CODEX_RUST``)."""

from __future__ import annotations

import os
import platform as _platform
import subprocess
import sys
from pathlib import Path
from typing import Mapping, Optional, Sequence

from ..exceptions import CodexError

__all__ = ["native_binary_path", "run_native", "target_triple", "wants_native"]

_TRUTHY = {"1", "true", "yes"}

_TRIPLES = {
    ("linux", "x86_64"): "x86_64-unknown-linux-musl",
    ("linux", "aarch64"): "aarch64-unknown-linux-musl",
    ("darwin", "x86_64"): "x86_64-apple-darwin",
    ("darwin", "arm64"): "aarch64-apple-darwin",
}
_ARCH_ALIASES = {"amd64": "x86_64", "x64": "x86_64", "arm64": "arm64", "aarch64": "aarch64"}


def wants_native(env: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if env is None else env
    value = env.get("CODEX_RUST")
    return value is not None and value.lower() in _TRUTHY


def target_triple(system: Optional[str] = None, machine: Optional[str] = None) -> str:
    """Rust target triple for this host.

    Raises:
        CodexError: ``Unsupported platform`` when no binary is built for it.
    """
    system = (system or sys.platform).lower()
    if system.startswith("linux"):
        system = "linux"
    machine = (machine or _platform.machine()).lower()
    arch = _ARCH_ALIASES.get(machine, machine)
    if system == "linux" and arch == "arm64":
        arch = "aarch64"
    if system == "darwin" and arch == "aarch64":
        arch = "arm64"
    triple = _TRIPLES.get((system, arch))
    if triple is None:
        raise CodexError(f"Unsupported platform: {system} ({machine})")
    return triple


def native_binary_path(triple: str, root: Optional[Path] = None) -> Path:
    base = root or Path(__file__).resolve().parent.parent
    return base / "bin" / f"codex-{triple}"


def run_native(argv: Sequence[str], root: Optional[Path] = None) -> int:
    """Run the native binary with ``argv`` and return its exit status."""
    binary = native_binary_path(target_triple(), root)
    try:
        completed = subprocess.run([str(binary), *argv])
    except OSError as exc:
        raise CodexError(f"failed to run native binary {binary}: {exc}") from exc
    return completed.returncode if completed.returncode >= 0 else 1
