"""
CLI package for codex_merge.

Provides the Typer application entrypoint and shared CLI utilities.
"""

from codex_merge.cli.app import app, main

__all__ = [
    "app",
    "main",
]
