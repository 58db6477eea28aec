"""codex-cli public API surface.

Only the entry point and a few stable types are exported; everything else
should be considered internal and may change.
"""

from .config.models import ApprovalMode, EffectiveConfig
from .exceptions import CodexError
from .version import __version__

__all__ = ["ApprovalMode", "CodexError", "EffectiveConfig", "__version__"]
