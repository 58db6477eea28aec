"""
Known model providers and their environment conventions.

Every provider speaks the OpenAI-compatible Responses API at ``base_url``
and reads its key from ``env_key``. Users may add or override providers in
the ``providers`` section of the config file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

__all__ = [
    "NO_API_KEY_REQUIRED",
    "PROVIDERS",
    "ProviderInfo",
    "get_provider",
    "provider_base_url",
    "provider_env_key",
]


@dataclass(frozen=True)
class ProviderInfo:
    name: str
    base_url: str
    env_key: str


PROVIDERS: Dict[str, ProviderInfo] = {
    "openai": ProviderInfo("OpenAI", "https://api.openai.com/v1", "OPENAI_API_KEY"),
    "openrouter": ProviderInfo(
        "OpenRouter", "https://openrouter.ai/api/v1", "OPENROUTER_API_KEY"
    ),
    "azure": ProviderInfo(
        "AzureOpenAI",
        "https://YOUR_PROJECT_NAME.openai.azure.com/openai",
        "AZURE_OPENAI_API_KEY",
    ),
    "gemini": ProviderInfo(
        "Gemini",
        "https://generativelanguage.googleapis.com/v1beta/openai",
        "GEMINI_API_KEY",
    ),
    "ollama": ProviderInfo("Ollama", "http://localhost:11434/v1", "OLLAMA_API_KEY"),
    "mistral": ProviderInfo("Mistral", "https://api.mistral.ai/v1", "MISTRAL_API_KEY"),
    "deepseek": ProviderInfo(
        "DeepSeek", "https://api.deepseek.com", "DEEPSEEK_API_KEY"
    ),
    "xai": ProviderInfo("xAI", "https://api.x.ai/v1", "XAI_API_KEY"),
    "groq": ProviderInfo("Groq", "https://api.groq.com/openai/v1", "GROQ_API_KEY"),
    "arceeai": ProviderInfo(
        "ArceeAI", "https://conductor.arcee.ai/v1", "ARCEEAI_API_KEY"
    ),
}

# Local providers that work without credentials.
NO_API_KEY_REQUIRED = frozenset({"ollama"})


def _from_mapping(value: Mapping[str, Any], key: str) -> Optional[ProviderInfo]:
    base_url = value.get("base_url") or value.get("baseURL")
    env_key = value.get("env_key") or value.get("envKey")
    if not base_url:
        return None
    return ProviderInfo(
        name=str(value.get("name") or key),
        base_url=str(base_url),
        env_key=str(env_key or f"{key.upper()}_API_KEY"),
    )


def get_provider(
    name: str, extra: Optional[Mapping[str, Any]] = None
) -> Optional[ProviderInfo]:
    """Look up a provider, letting user-configured entries win."""
    key = (name or "").strip().lower()
    for cfg_key, value in (extra or {}).items():
        if str(cfg_key).lower() == key and isinstance(value, Mapping):
            info = _from_mapping(value, key)
            if info:
                return info
    return PROVIDERS.get(key)


def provider_env_key(name: str, extra: Optional[Mapping[str, Any]] = None) -> str:
    """Environment variable holding the API key for ``name``.

    Unknown providers follow the ``<PROVIDER>_API_KEY`` convention.
    """
    info = get_provider(name, extra)
    if info:
        return info.env_key
    return f"{(name or '').strip().upper()}_API_KEY"


def provider_base_url(
    name: str,
    env: Mapping[str, str],
    extra: Optional[Mapping[str, Any]] = None,
) -> Optional[str]:
    """Base URL for ``name``; ``<PROVIDER>_BASE_URL`` overrides the table."""
    key = (name or "").strip().upper()
    override = env.get(f"{key}_BASE_URL")
    if override:
        return override.rstrip("/")
    info = get_provider(name, extra)
    return info.base_url.rstrip("/") if info else None
