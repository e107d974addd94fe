"""
Corpus loader.

Reads one relative JSON path from both language trees. The two reads are
independent and run concurrently; both complete before the pair is handed
to anyone.

A required file that is missing or unparseable aborts the run with a
``CorpusLoadError`` naming the stage. Optional files (fluff, adventures,
spell class lists) resolve to None when absent.
"""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from codex_merge.core.exceptions import CorpusLoadError
from codex_merge.logger import get_logger

log = get_logger("corpus_loader")

PathLike = Union[str, Path]


@dataclass
class CorpusPair:
    relative_path: str
    primary: Optional[Any]
    secondary: Optional[Any]


def read_json(path: Path, *, stage: str, required: bool = True) -> Optional[Any]:
    if not path.exists():
        if required:
            raise CorpusLoadError(stage, path, "file not found")
        log.debug("[%s] optional file absent: %s", stage, path)
        return None

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise CorpusLoadError(stage, path, f"invalid JSON ({exc})") from exc
    except OSError as exc:
        raise CorpusLoadError(stage, path, str(exc)) from exc

    log.debug("[%s] loaded %s", stage, path)
    return data


class CorpusLoader:
    def __init__(self, primary_dir: PathLike, secondary_dir: PathLike):
        self.primary_dir = Path(primary_dir)
        self.secondary_dir = Path(secondary_dir)

    def load(
        self,
        relative_path: str,
        *,
        stage: Optional[str] = None,
        required: bool = True,
        secondary_required: Optional[bool] = None,
    ) -> CorpusPair:
        stage = stage or relative_path
        if secondary_required is None:
            secondary_required = required

        with ThreadPoolExecutor(max_workers=2) as pool:
            primary_future = pool.submit(
                read_json, self.primary_dir / relative_path, stage=stage, required=required
            )
            secondary_future = pool.submit(
                read_json,
                self.secondary_dir / relative_path,
                stage=stage,
                required=secondary_required,
            )
            primary = primary_future.result()
            secondary = secondary_future.result()

        log.info("[%s] corpus pair loaded: %s", stage, relative_path)
        return CorpusPair(relative_path=relative_path, primary=primary, secondary=secondary)

    def load_optional(self, relative_path: str, *, stage: Optional[str] = None) -> CorpusPair:
        return self.load(relative_path, stage=stage, required=False)
