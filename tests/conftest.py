import json
import sys
from pathlib import Path

import pytest

# Ensure the project src directory is on sys.path for test imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_PATH = PROJECT_ROOT / "src"
if SRC_PATH not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from codex_merge.config import CMConfig, get_config  # noqa: E402
from codex_merge.core.context import RunContext  # noqa: E402
from codex_merge.logger import get_logger  # noqa: E402


def _config_dict(tmp_path: Path, **overrides) -> dict:
    base = get_config()
    data = {
        "paths": {
            "primary_dir": str(tmp_path / "en"),
            "secondary_dir": str(tmp_path / "zh"),
            "output_dir": str(tmp_path / "out"),
        },
        "languages": {"primary": "en", "secondary": "zh"},
        "pipeline": {"empty_localized_value": "", "write_workbook": True},
        "logging": dict(base.logging),
        "i18n": dict(base.i18n),
        "variants": dict(base.variants),
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides) -> CMConfig:
        return CMConfig.from_dict(_config_dict(tmp_path, **overrides))

    return _make


@pytest.fixture
def ctx(make_config) -> RunContext:
    return RunContext.from_config(make_config(), get_logger("tests"))


class CorpusWriter:
    """Writes the same relative JSON path into both language trees."""

    def __init__(self, root: Path):
        self.primary_dir = root / "en"
        self.secondary_dir = root / "zh"
        self.primary_dir.mkdir(parents=True, exist_ok=True)
        self.secondary_dir.mkdir(parents=True, exist_ok=True)

    def write(self, relative_path: str, primary=None, secondary=None) -> None:
        for directory, payload in ((self.primary_dir, primary), (self.secondary_dir, secondary)):
            if payload is None:
                continue
            path = directory / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")


@pytest.fixture
def corpus(tmp_path) -> CorpusWriter:
    return CorpusWriter(tmp_path)
