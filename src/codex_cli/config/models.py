"""Configuration dataclasses shared across layers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional

__all__ = ["ApprovalMode", "EffectiveConfig", "REASONING_EFFORTS"]

REASONING_EFFORTS = ("low", "medium", "high")


class ApprovalMode(str, Enum):
    """How much the agent may do without asking first."""

    SUGGEST = "suggest"
    AUTO_EDIT = "auto-edit"
    FULL_AUTO = "full-auto"

    @classmethod
    def parse(cls, value: Any) -> Optional["ApprovalMode"]:
        if isinstance(value, cls):
            return value
        if not value:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class EffectiveConfig:
    """Merged configuration for one process run.

    Built once before dispatch. The only sanctioned changes afterwards are
    late patches of ``api_key``, ``model`` and ``provider`` via
    :meth:`with_overrides`, which returns a new instance.
    """

    model: str
    provider: str = "openai"
    approval_mode: Optional[ApprovalMode] = None
    api_key: str = ""
    base_url: Optional[str] = None
    notify: bool = False
    reasoning_effort: str = "high"
    flex_mode: bool = False
    disable_response_storage: bool = False
    instructions: str = ""
    pretty_print: bool = True
    full_stdout: bool = False

    def with_overrides(self, **changes: Any) -> "EffectiveConfig":
        allowed = {"api_key", "model", "provider", "base_url", "flex_mode"}
        unknown = set(changes) - allowed
        if unknown:
            raise TypeError(f"cannot override {sorted(unknown)} after dispatch")
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Serializable view with the key redacted."""
        return {
            "model": self.model,
            "provider": self.provider,
            "approval_mode": self.approval_mode.value if self.approval_mode else None,
            "api_key": "[REDACTED]" if self.api_key else "",
            "base_url": self.base_url,
            "notify": self.notify,
            "reasoning_effort": self.reasoning_effort,
            "flex_mode": self.flex_mode,
            "disable_response_storage": self.disable_response_storage,
            "pretty_print": self.pretty_print,
            "full_stdout": self.full_stdout,
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EffectiveConfig":
        effort = str(data.get("reasoning_effort") or "high").lower()
        if effort not in REASONING_EFFORTS:
            effort = "high"
        return cls(
            model=str(data.get("model") or ""),
            provider=str(data.get("provider") or "openai"),
            approval_mode=ApprovalMode.parse(data.get("approval_mode")),
            api_key=str(data.get("api_key") or ""),
            base_url=data.get("base_url") or None,
            notify=bool(data.get("notify", False)),
            reasoning_effort=effort,
            flex_mode=bool(data.get("flex_mode", False)),
            disable_response_storage=bool(data.get("disable_response_storage", False)),
            instructions=str(data.get("instructions") or ""),
            pretty_print=bool(data.get("pretty_print", True)),
            full_stdout=bool(data.get("full_stdout", False)),
        )
