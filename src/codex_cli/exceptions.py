"""
Common exception hierarchy for codex-cli.

The CLI layer maps these to user-facing messages and exit codes; lower
layers raise them and never call ``sys.exit`` themselves.
"""


class CodexError(Exception):
    """Base exception for all codex-cli errors."""

    exit_code = 1


class UsageError(CodexError):
    """Raised for invalid user input (bad flags, missing prompt, unknown shell)."""

    pass


class ConfigError(CodexError):
    """Raised when configuration cannot be loaded or is invalid."""

    pass


class AuthError(CodexError):
    """Raised when credentials cannot be obtained."""

    pass


class MissingApiKeyError(AuthError):
    """Raised when a provider requires an API key and none was found."""

    def __init__(self, provider: str, env_key: str, hint: str = "") -> None:
        super().__init__(f"Missing {provider} API key.")
        self.provider = provider
        self.env_key = env_key
        self.hint = hint


class LoginError(AuthError):
    """Raised when the interactive sign-in flow fails."""

    pass


class RolloutError(CodexError):
    """Raised when a saved rollout or session file cannot be read."""

    pass


class AgentError(CodexError):
    """Raised when a request to the model API fails."""

    pass
