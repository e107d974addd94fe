# tests/test_pathing.py

from __future__ import annotations

from pathlib import Path

from codex_merge.utils import project_root, resolve_config_path, resolve_project_path


def test_project_root_holds_config():
    assert (project_root() / "config" / "codex_merge.yml").exists()


def test_relative_config_paths_resolve_against_project_root():
    assert resolve_config_path("input/en", "unused") == project_root() / "input" / "en"
    assert resolve_config_path(None, "output") == resolve_project_path("output")


def test_absolute_config_paths_are_kept(tmp_path):
    assert resolve_config_path(str(tmp_path), "output") == Path(tmp_path)
