"""User config, instructions and project doc loading plus CLI config assembly.

Behavior: if the user explicitly passes ``--project-doc <path>`` and the file
is missing or unreadable, raise ``ConfigError`` so the CLI can fail fast with
a clear message. Problems with the implicit user config file are logged and
the defaults are used instead.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import dotenv_values

from ..exceptions import ConfigError
from .defaults import (
    CONFIG_FILENAMES,
    PROJECT_DOC_FILENAMES,
    PROJECT_DOC_MAX_BYTES,
    PROJECT_DOC_SEPARATOR,
    config_dir,
    get_default_config,
    instructions_path,
)
from .models import EffectiveConfig

__all__ = [
    "bootstrap_config_dir",
    "build_cli_config",
    "build_effective_config",
    "deep_merge",
    "discover_project_doc",
    "load_config",
    "load_environment",
    "load_file_config",
    "load_project_doc",
    "merge_config",
]

logger = logging.getLogger(__name__)

_ENV_TO_CONFIG_KEY = {
    "PRETTY_PRINT": "pretty_print",
    "CODEX_QUIET_MODE": "quiet",
}

# camelCase keys written by older releases of the config file.
_LEGACY_ALIASES = {
    "approvalMode": "approval_mode",
    "disableResponseStorage": "disable_response_storage",
    "flexMode": "flex_mode",
    "reasoningEffort": "reasoning_effort",
    "fullStdout": "full_stdout",
}

_DEFAULT_CONFIG_TEXT = "# codex-cli configuration\nmodel: {model}\n"


def merge_config(
    cli_args: Dict[str, Any],
    env_config: Dict[str, Any],
    dotenv_config: Dict[str, Any],
    file_config: Dict[str, Any],
    defaults: Dict[str, Any],
) -> Dict[str, Any]:
    """Merge configuration dictionaries honoring precedence order."""
    merged = defaults.copy()
    deep_merge(merged, file_config)
    deep_merge(merged, dotenv_config)
    deep_merge(merged, env_config)
    cli_filtered = {key: value for key, value in cli_args.items() if value is not None}
    deep_merge(merged, cli_filtered)
    return merged


def deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> None:
    """Recursively merge ``overlay`` into ``base`` in place."""
    for key, value in overlay.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value


def _truthy(value: Any) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def load_environment(dotenv_path: Optional[Path] = None) -> Dict[str, str]:
    """Process environment layered over ``.env`` values (env wins)."""
    path = dotenv_path or Path(".env")
    merged: Dict[str, str] = {}
    if path.exists():
        for key, value in dotenv_values(path).items():
            if value is not None:
                merged[key] = value
    merged.update(os.environ)
    return merged


def _env_section(values: Mapping[str, Optional[str]]) -> Dict[str, Any]:
    config: Dict[str, Any] = {}
    for env_key, config_key in _ENV_TO_CONFIG_KEY.items():
        if values.get(env_key) is not None:
            config[config_key] = _truthy(values[env_key])
    return config


def load_env_config() -> Dict[str, Any]:
    """Load supported settings from the current environment."""
    return _env_section(os.environ)


def load_dotenv_config(dotenv_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load supported settings from a ``.env`` file."""
    path = dotenv_path or Path(".env")
    if not path.exists():
        return {}
    return _env_section(dotenv_values(path))


def _apply_aliases(config: Dict[str, Any]) -> None:
    """Normalize legacy keys to their canonical names in place."""
    for legacy, canonical in _LEGACY_ALIASES.items():
        if legacy in config:
            config.setdefault(canonical, config.pop(legacy))


def load_file_config(base: Optional[Path] = None) -> Dict[str, Any]:
    """Load the user config file (YAML, JSON accepted) or return an empty dict."""
    root = base or config_dir()
    for name in CONFIG_FILENAMES:
        candidate = root / name
        if not candidate.exists():
            continue
        try:
            with candidate.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        except (yaml.YAMLError, OSError) as exc:
            logger.warning("Failed to load %s: %s", candidate, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: expected a mapping", candidate)
            return {}
        _apply_aliases(data)
        return data
    return {}


def load_instructions(base: Optional[Path] = None) -> str:
    path = instructions_path(base)
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError:
        return ""


def discover_project_doc(cwd: Path) -> Optional[Path]:
    """Find the project doc in ``cwd`` or a parent up to the git root."""
    current = cwd.resolve()
    chain = [current, *current.parents]
    root_index = next(
        (i for i, directory in enumerate(chain) if (directory / ".git").exists()),
        None,
    )
    # Outside a git checkout only cwd itself is searched.
    candidates = chain[: root_index + 1] if root_index is not None else [current]
    for directory in candidates:
        for name in PROJECT_DOC_FILENAMES:
            path = directory / name
            if path.is_file():
                return path
    return None


def load_project_doc(path: Path, explicit: bool = False) -> str:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        if explicit:
            raise ConfigError(f"failed to read project doc {path}: {exc}")
        return ""
    if len(raw) > PROJECT_DOC_MAX_BYTES:
        logger.warning(
            "Project doc %s exceeds %d bytes; truncating", path, PROJECT_DOC_MAX_BYTES
        )
        raw = raw[:PROJECT_DOC_MAX_BYTES]
    return raw.decode("utf-8", errors="replace").strip()


def _compose_instructions(
    base: Optional[Path],
    cwd: Path,
    disable_project_doc: bool,
    project_doc_path: Optional[Path],
) -> str:
    user = load_instructions(base)
    doc = ""
    if not disable_project_doc:
        if project_doc_path is not None:
            path = project_doc_path if project_doc_path.is_absolute() else cwd / project_doc_path
            if not path.exists():
                raise ConfigError(f"project doc not found: {path}")
            doc = load_project_doc(path, explicit=True)
        else:
            found = discover_project_doc(cwd)
            doc = load_project_doc(found) if found else ""
    if user and doc:
        return f"{user}{PROJECT_DOC_SEPARATOR}{doc}"
    return user or doc


def bootstrap_config_dir(base: Optional[Path] = None) -> Path:
    """Create the config dir, a default config file and the instructions file.

    Returns the instructions file path.
    """
    root = base or config_dir()
    root.mkdir(parents=True, exist_ok=True)
    if not any((root / name).exists() for name in CONFIG_FILENAMES):
        (root / CONFIG_FILENAMES[0]).write_text(
            _DEFAULT_CONFIG_TEXT.format(model=get_default_config()["model"]),
            encoding="utf-8",
        )
    path = instructions_path(root)
    if not path.exists():
        path.write_text("", encoding="utf-8")
    return path


def build_cli_config(args) -> Dict[str, Any]:
    """Translate argparse args into a config dict (only flags actually set)."""
    cfg: Dict[str, Any] = {}
    if getattr(args, "model", None):
        cfg["model"] = args.model
    if getattr(args, "provider", None):
        cfg["provider"] = args.provider
    if getattr(args, "approval_mode", None):
        cfg["approval_mode"] = args.approval_mode
    if getattr(args, "notify", False):
        cfg["notify"] = True
    if getattr(args, "reasoning", None):
        cfg["reasoning_effort"] = args.reasoning
    if getattr(args, "flex_mode", False):
        cfg["flex_mode"] = True
    if getattr(args, "disable_response_storage", False):
        cfg["disable_response_storage"] = True
    if getattr(args, "full_stdout", False):
        cfg["full_stdout"] = True
    if getattr(args, "quiet", False):
        cfg["quiet"] = True
    return cfg


def load_config(
    args,
    cwd: Optional[Path] = None,
    base: Optional[Path] = None,
    dotenv_path: Optional[Path] = None,
) -> Dict[str, Any]:
    """Merge defaults, user file, .env, environment and CLI into one dict."""
    cwd = cwd or Path.cwd()
    merged = merge_config(
        cli_args=build_cli_config(args),
        env_config=load_env_config(),
        dotenv_config=load_dotenv_config(dotenv_path),
        file_config=load_file_config(base),
        defaults=get_default_config(),
    )
    merged["provider"] = str(merged.get("provider") or "openai").lower()
    project_doc = getattr(args, "project_doc", None)
    merged["instructions"] = _compose_instructions(
        base,
        cwd,
        bool(getattr(args, "no_project_doc", False)),
        Path(project_doc) if project_doc else None,
    )
    logger.debug(
        "config loaded: model=%s provider=%s", merged.get("model"), merged["provider"]
    )
    return merged


def build_effective_config(
    merged: Mapping[str, Any], api_key: str = "", base_url: Optional[str] = None
) -> EffectiveConfig:
    data = dict(merged)
    data["api_key"] = api_key
    if base_url:
        data["base_url"] = base_url
    return EffectiveConfig.from_mapping(data)
