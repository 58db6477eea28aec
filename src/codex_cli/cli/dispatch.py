"""
Mode dispatch.

Branches are tried in a fixed order and the first match owns the rest of
the process: completion, help, config editing, then (after config and auth
are resolved) history, view, full-context, quiet and finally the
interactive UI.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt

from ..agent.rollout import list_sessions, load_rollout, resolve_rollout_path
from ..agent.single_pass import run_single_pass
from ..auth import LoginFlow, auth_file_path, load_credentials, redeem_credits, resolve_api_key
from ..config.defaults import FLEX_MODE_MODELS, config_dir
from ..config.loader import build_effective_config, load_config, load_environment
from ..config.models import EffectiveConfig
from ..config.providers import provider_base_url
from ..exceptions import LoginError, RolloutError, UsageError
from ..tui.app import TerminalChatApp
from ..tui.sessions import select_session
from ..tui.viewer import render_rollout
from ..utils.terminal import run_prompt
from ..utils.update_check import check_for_updates
from .approval import bypasses_sandbox, resolve_approval_policy, resolve_writable_roots
from .completion import completion_script
from .config_edit import edit_instructions
from .quiet import run_quiet_mode

__all__ = ["dispatch", "prompt_from_args"]

logger = logging.getLogger(__name__)


def prompt_from_args(args: argparse.Namespace) -> str:
    return " ".join(getattr(args, "input", None) or [])


def _error(console: Console, message: str) -> None:
    console.print(message, style="red", markup=False, highlight=False, soft_wrap=True)


def _login_callable(auth_file: Path, console: Console):
    if not sys.stdin.isatty():
        return None

    async def _login() -> str:
        return await LoginFlow(auth_file, echo=console.print).run()

    return _login


async def _redeem_free_credits(auth_file: Path, console: Console) -> None:
    console.print("[bold]codex --free[/bold] attempting to redeem credits...")
    saved = load_credentials(auth_file)
    try:
        if saved is None or not saved.refresh_token:
            login = _login_callable(auth_file, console)
            if login is None:
                raise LoginError("sign in is required to redeem credits")
            await login()
            saved = load_credentials(auth_file)
        if saved is None or not saved.refresh_token:
            raise LoginError("no refresh token saved after sign in")
        result = await redeem_credits(saved.refresh_token, saved.id_token)
    except LoginError as exc:
        console.print(f"[yellow]Could not redeem credits: {exc}[/yellow]")
        return
    granted = result.get("granted_chatgpt_subscriber_api_credits")
    if granted:
        console.print(f"[green]Redeemed ${granted} in API credits.[/green]")
    else:
        console.print("[dim]No credits were available to redeem.[/dim]")


def _validate_flex_mode(config: EffectiveConfig, from_flag: bool) -> EffectiveConfig:
    if not config.flex_mode or config.model in FLEX_MODE_MODELS:
        return config
    if from_flag:
        raise UsageError(
            "The --flex-mode option is only supported when using the 'o3' or "
            f"'o4-mini' models. Current model: '{config.model}'."
        )
    logger.info("flex mode disabled: model %s does not support it", config.model)
    return config.with_overrides(flex_mode=False)


async def _build_config(
    console: Console,
    args: argparse.Namespace,
    cwd: Path,
    base: Path,
    dotenv_path: Optional[Path],
) -> tuple[Dict[str, Any], EffectiveConfig]:
    merged = load_config(args, cwd=cwd, base=base, dotenv_path=dotenv_path)
    env = load_environment(dotenv_path)
    provider = merged["provider"]
    extra_providers = merged.get("providers") if isinstance(merged.get("providers"), dict) else None
    auth_file = auth_file_path(base)

    resolved = await resolve_api_key(
        provider,
        env,
        auth_file,
        force_login=bool(args.login),
        login=_login_callable(auth_file, console),
        extra_providers=extra_providers,
    )
    logger.debug("api key source: %s", resolved.source)
    if args.free and provider == "openai":
        await _redeem_free_credits(auth_file, console)

    config = build_effective_config(
        merged,
        api_key=resolved.api_key,
        base_url=provider_base_url(provider, env, extra_providers),
    )
    try:
        await check_for_updates(base, console)
    except Exception as exc:  # never block the primary workflow
        logger.debug("update check skipped: %s", exc)
    return merged, _validate_flex_mode(config, from_flag=bool(args.flex_mode))


def _view(console: Console, err: Console, path: Path, label: str, config: EffectiveConfig) -> int:
    try:
        rollout = load_rollout(path)
    except RolloutError as exc:
        _error(err, f"{label} {exc}")
        return 1
    render_rollout(console, rollout, config.model, config.provider, config.full_stdout)
    return 0


async def _confirm(console: Console, message: str) -> bool:
    return await run_prompt(Confirm.ask, message, console=console, default=False)


async def dispatch(
    console: Console,
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
    *,
    err_console: Optional[Console] = None,
    cwd: Optional[Path] = None,
    base: Optional[Path] = None,
    dotenv_path: Optional[Path] = None,
) -> int:
    """Run the single mode selected by ``args``; returns the exit status."""
    err = err_console or Console(stderr=True)
    inputs = list(getattr(args, "input", None) or [])

    if inputs and inputs[0] == "completion":
        shell = inputs[1] if len(inputs) > 1 else "bash"
        print(completion_script(shell))
        return 0

    if args.help:
        print(parser.format_help())
        return 0

    base = base or config_dir()
    if args.config:
        return edit_instructions(base)

    cwd = cwd or Path.cwd()
    merged, config = await _build_config(console, args, cwd, base, dotenv_path)
    prompt = prompt_from_args(args)

    if args.history:
        selection = await run_prompt(select_session, console, list_sessions(base))
        if selection is None:
            return 0
        if selection.mode == "view":
            return _view(console, err, selection.path, "Error reading session file:", config)
        prompt = f"Resume this session: {selection.path}"

    if args.view:
        path = resolve_rollout_path(args.view, cwd)
        return _view(console, err, path, "Error reading rollout file:", config)

    if args.full_context:
        if not prompt.strip():
            prompt = await run_prompt(
                Prompt.ask, "What would you like to change?", console=console
            )
        await run_single_pass(prompt, config, cwd, console, lambda m: _confirm(console, m))
        return 0

    writable_roots = resolve_writable_roots(args.writable_root)
    approval_policy = resolve_approval_policy(args, merged.get("approval_mode"))
    if bypasses_sandbox(args):
        logger.warning("running without sandbox or confirmation prompts")

    if args.quiet or merged.get("quiet"):
        await run_quiet_mode(prompt, args.image, approval_policy, writable_roots, config)
        return 0

    app = TerminalChatApp(
        console,
        config,
        approval_policy,
        writable_roots,
        prompt=prompt,
        image_paths=args.image,
        full_stdout=config.full_stdout,
        config_dir=base,
    )
    return await app.run()
