# src/codex_merge/utils/pathing.py

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


# This file lives at:
#   <project_root>/src/codex_merge/utils/pathing.py
#
# Path(__file__).resolve().parents gives:
#   [0] .../src/codex_merge/utils
#   [1] .../src/codex_merge
#   [2] .../src
#   [3] .../ (project root)
_PROJECT_ROOT = Path(__file__).resolve().parents[3]


def project_root() -> Path:
    """
    Return the absolute path to the project root directory.

    The project root is the directory that contains:
      - src/
      - config/
    """
    return _PROJECT_ROOT


def resolve_project_path(relative: Union[str, Path]) -> Path:
    """
    Resolve a path relative to the project root.

    Examples:
        resolve_project_path("input/en")
        resolve_project_path(Path("output") / "collection")
    """
    return project_root() / Path(relative)


def resolve_config_path(value: Optional[Union[str, Path]], default: str) -> Path:
    """
    Paths from ``config/codex_merge.yml`` are relative to the project root;
    absolute paths are kept as they are.
    """
    path = Path(value) if value else Path(default)
    return path if path.is_absolute() else resolve_project_path(path)

