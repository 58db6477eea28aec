"""Credential cache, sign-in flow and API key resolution."""

from .credentials import (
    FRESHNESS_WINDOW,
    CredentialRecord,
    auth_file_path,
    load_credentials,
    save_credentials,
)
from .login import LoginFlow, redeem_credits
from .resolver import ResolvedAuth, missing_key_hint, resolve_api_key

__all__ = [
    "FRESHNESS_WINDOW",
    "CredentialRecord",
    "LoginFlow",
    "ResolvedAuth",
    "auth_file_path",
    "load_credentials",
    "missing_key_hint",
    "redeem_credits",
    "resolve_api_key",
    "save_credentials",
]
