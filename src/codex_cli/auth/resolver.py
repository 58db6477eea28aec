"""API key resolution.

Validates credentials early so runs fail fast with clear guidance. The
resolved key is returned to the caller and threaded through
``EffectiveConfig``; the process environment is left untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Optional

from ..config.providers import NO_API_KEY_REQUIRED, provider_env_key
from ..exceptions import MissingApiKeyError
from .credentials import CredentialRecord, load_credentials

__all__ = ["ResolvedAuth", "missing_key_hint", "resolve_api_key"]

logger = logging.getLogger(__name__)

LoginCallable = Callable[[], Awaitable[str]]


@dataclass(frozen=True)
class ResolvedAuth:
    api_key: str
    source: str  # "env" | "cache" | "login" | "none"
    credentials: Optional[CredentialRecord] = None


def missing_key_hint(provider: str, env_key: str) -> str:
    p = provider.lower()
    if p == "openai":
        return "You can create a key here: https://platform.openai.com/account/api-keys"
    if p == "azure":
        return f"You can create a {env_key} in Azure AI Foundry portal at https://ai.azure.com."
    if p == "gemini":
        return f"You can create a {env_key} in the Google AI Studio."
    return f"You can create a {env_key} in the {provider} dashboard."


def _missing(provider: str, env_key: str) -> MissingApiKeyError:
    return MissingApiKeyError(provider, env_key, missing_key_hint(provider, env_key))


def _env_value(env: Mapping[str, str], key: str) -> str:
    return (env.get(key) or "").strip()


async def resolve_api_key(
    provider: str,
    env: Mapping[str, str],
    auth_file: Path,
    *,
    force_login: bool = False,
    login: Optional[LoginCallable] = None,
    extra_providers: Optional[Mapping[str, Any]] = None,
) -> ResolvedAuth:
    """Resolve the API key for ``provider``.

    Order for OpenAI: fresh cached credentials, ``OPENAI_API_KEY``, then the
    interactive ``login`` flow (always used when ``force_login``). Other
    providers read their environment variable only.

    Raises:
        MissingApiKeyError: when no key is found and the provider needs one.
    """
    name = (provider or "openai").strip().lower()
    env_key = provider_env_key(name, extra_providers)

    if name != "openai":
        value = _env_value(env, env_key)
        if value:
            return ResolvedAuth(value, "env")
        if name in NO_API_KEY_REQUIRED:
            return ResolvedAuth("", "none")
        raise _missing(provider, env_key)

    cached = load_credentials(auth_file)
    if not force_login:
        if cached and cached.api_key and not cached.is_expired():
            logger.debug("using cached credentials from %s", auth_file)
            return ResolvedAuth(cached.api_key, "cache", cached)
        if cached and cached.api_key:
            logger.info("cached credentials in %s are expired", auth_file)
        value = _env_value(env, env_key)
        if value:
            return ResolvedAuth(value, "env", cached)

    if login is None:
        raise _missing(provider, env_key)
    api_key = await login()
    if not api_key:
        raise _missing(provider, env_key)
    return ResolvedAuth(api_key, "login", load_credentials(auth_file))
