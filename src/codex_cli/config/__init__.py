"""Configuration loading, defaults, and the provider table."""

from codex_cli.config.models import ApprovalMode, EffectiveConfig
from codex_cli.config.loader import (
    bootstrap_config_dir,
    build_cli_config,
    build_effective_config,
    deep_merge,
    discover_project_doc,
    load_config,
    load_environment,
    merge_config,
)
from codex_cli.config.defaults import (
    config_dir,
    get_default_config,
    instructions_path,
    sessions_dir,
)
from codex_cli.config.providers import (
    NO_API_KEY_REQUIRED,
    PROVIDERS,
    ProviderInfo,
    get_provider,
    provider_base_url,
    provider_env_key,
)

__all__ = [
    "ApprovalMode",
    "EffectiveConfig",
    "NO_API_KEY_REQUIRED",
    "PROVIDERS",
    "ProviderInfo",
    "bootstrap_config_dir",
    "build_cli_config",
    "build_effective_config",
    "config_dir",
    "deep_merge",
    "discover_project_doc",
    "get_default_config",
    "get_provider",
    "instructions_path",
    "load_config",
    "load_environment",
    "merge_config",
    "provider_base_url",
    "provider_env_key",
    "sessions_dir",
]
