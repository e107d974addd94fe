"""
Compatibility wrapper around the centralized logging package.

Prefer importing from ``codex_merge.logging`` directly:
    from codex_merge.logging import get_logger
"""

from codex_merge.logging import (
    get_logger,
    set_debug,
)

__all__ = [
    "get_logger",
    "set_debug",
]
