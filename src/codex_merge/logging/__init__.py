"""
Logging package for ``codex_merge``.

Use ``get_logger(__name__)`` in modules to inherit shared handlers and write to a
module-specific log file.
"""

from .logger import (
    get_logger,
    set_debug,
)

__all__ = [
    "get_logger",
    "set_debug",
]
