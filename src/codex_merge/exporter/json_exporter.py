"""
json_exporter.py
JSON writers for merged collections, per-record files and run reports.

This exporter:
- Converts dataclasses and objects to dictionaries (NOT strings)
- Writes one collection document per content kind
- Writes one file per item / spell record, named after its escaped id
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

from codex_merge.entities import MergedRecord
from codex_merge.identity import escape_id
from codex_merge.logger import get_logger

log = get_logger("json_exporter")

COLLECTION_DIR = "collection"


def _to_json_compatible(obj: Any) -> Any:
    """
    Recursively convert objects into JSON-compatible structures.

    Rules:
    - Primitives pass through
    - dataclasses -> dict (recursively)
    - dict -> dict (recursively)
    - list / tuple / set -> list (recursively)
    - Unknown objects -> __dict__ if present, else str(obj)
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj

    if is_dataclass(obj) and not isinstance(obj, type):
        return {k: _to_json_compatible(v) for k, v in asdict(obj).items()}

    if isinstance(obj, Mapping):
        return {str(k): _to_json_compatible(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set, frozenset)):
        return [_to_json_compatible(v) for v in obj]

    if hasattr(obj, "__dict__"):
        return {k: _to_json_compatible(v) for k, v in obj.__dict__.items()}

    return str(obj)


def write_json(data: Any, output_path: str | Path, indent: int = 2) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", encoding="utf-8") as f:
        json.dump(_to_json_compatible(data), f, indent=indent, ensure_ascii=False)

    log.debug("Wrote %s (%d bytes)", output_path, output_path.stat().st_size)
    return output_path


def collection_path(output_dir: str | Path, name: str) -> Path:
    return Path(output_dir) / COLLECTION_DIR / f"{name}.json"


def export_collection(collection: Dict[str, Any], output_dir: str | Path) -> Path:
    """``{"type": "<kind>Collection", "data": [...]}`` -> collection/<kind>Collection.json"""
    path = write_json(collection, collection_path(output_dir, collection["type"]))
    log.info("Exported %s: %d records", collection["type"], len(collection.get("data") or []))
    return path


def export_records(
    records: Iterable[MergedRecord],
    directory: str | Path,
    *,
    primary_lang: str = "en",
    secondary_lang: str = "zh",
) -> int:
    directory = Path(directory)
    count = 0
    for record in records:
        write_json(
            record.to_dict(primary_lang, secondary_lang),
            directory / f"{escape_id(record.id)}.json",
        )
        count += 1
    log.info("Exported %d record files to %s", count, directory)
    return count


def export_sources(source_map: Mapping[str, Any], output_dir: str | Path) -> Path:
    return write_json({"type": "sources", "data": source_map}, collection_path(output_dir, "sources"))
