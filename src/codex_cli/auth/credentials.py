"""Cached credential file (``auth.json``) handling."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..config.defaults import config_dir

__all__ = [
    "FRESHNESS_WINDOW",
    "CredentialRecord",
    "auth_file_path",
    "load_credentials",
    "save_credentials",
]

logger = logging.getLogger(__name__)

FRESHNESS_WINDOW = timedelta(days=28)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def auth_file_path(base: Optional[Path] = None) -> Path:
    return (base or config_dir()) / "auth.json"


def _parse_timestamp(value: Any) -> datetime:
    """Parse ``last_refresh``; anything unusable counts as the epoch."""
    if not isinstance(value, str) or not value.strip():
        return _EPOCH
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class CredentialRecord:
    """Credentials persisted by the sign-in flow."""

    api_key: str
    refresh_token: str = ""
    id_token: Optional[str] = None
    access_token: Optional[str] = None
    last_refresh: datetime = _EPOCH

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        current = now or datetime.now(timezone.utc)
        return current - self.last_refresh > FRESHNESS_WINDOW

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "CredentialRecord":
        tokens = data.get("tokens") or {}
        if not isinstance(tokens, dict):
            tokens = {}
        return cls(
            api_key=str(data.get("OPENAI_API_KEY") or ""),
            refresh_token=str(tokens.get("refresh_token") or ""),
            id_token=tokens.get("id_token"),
            access_token=tokens.get("access_token"),
            last_refresh=_parse_timestamp(data.get("last_refresh")),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "OPENAI_API_KEY": self.api_key,
            "tokens": {
                "id_token": self.id_token,
                "access_token": self.access_token,
                "refresh_token": self.refresh_token,
            },
            "last_refresh": self.last_refresh.isoformat().replace("+00:00", "Z"),
        }


def load_credentials(path: Path) -> Optional[CredentialRecord]:
    """Read the credential file; a missing or corrupt file yields ``None``."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as exc:
        logger.debug("ignoring unreadable credential file %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        return None
    return CredentialRecord.from_json(data)


def save_credentials(path: Path, record: CredentialRecord) -> None:
    """Write the credential file readable by the current user only."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(str(path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        json.dump(record.to_json(), fh, indent=2)
