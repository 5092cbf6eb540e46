"""tokenpaint: live preview and persistence of per-theme syntax colour rules."""
from __future__ import annotations

__version__ = "0.1.0"

from tokenpaint.config import TokenPaintConfig
from tokenpaint.host import Host

__all__ = [
    "__version__",
    "TokenPaintConfig",
    "Host",
]
