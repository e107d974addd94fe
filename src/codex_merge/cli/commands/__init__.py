"""
CLI command modules for codex_merge.

Each command module defines a single Typer-compatible command function.
"""

from codex_merge.cli.commands.compare import compare_command
from codex_merge.cli.commands.merge import merge_command

__all__ = [
    "compare_command",
    "merge_command",
]
