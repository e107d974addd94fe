import os
from pathlib import Path

import yaml

CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "codex_merge.yml"
CONFIG_ENV_VAR = "CODEX_MERGE_CONFIG"


class CMConfig:
    def __init__(self, data):
        self.paths = data.get("paths", {})
        self.languages = data.get("languages", {})
        self.pipeline = data.get("pipeline", {})
        self.logging = data.get("logging", {})
        self.i18n = data.get("i18n", {})
        self.variants = data.get("variants", {})
        self.debug = data.get("debug", False)

    @classmethod
    def from_dict(cls, data) -> 'CMConfig':
        return cls(data or {})

    @property
    def primary_lang(self) -> str:
        return self.languages.get("primary", "en")

    @property
    def secondary_lang(self) -> str:
        return self.languages.get("secondary", "zh")

    @property
    def empty_localized_value(self):
        return self.pipeline.get("empty_localized_value", "")


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override) if override else CONFIG_PATH


def load_config(path=None) -> 'CMConfig':
    path = Path(path) if path else config_path()
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return CMConfig(data)

_config_cache = None

def get_config() -> 'CMConfig':
    global _config_cache
    if _config_cache is None:
        _config_cache = load_config()
    return _config_cache
