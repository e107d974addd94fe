# src/codex_merge/identity/canonical_key.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from codex_merge.core.exceptions import StructuralError

# Language-neutral name fields, checked in order. The corpora use ENG_name.
ALTERNATE_NAME_FIELDS = ("ENG_name", "alternateName")
KEY_SEPARATOR = "|"


# -----------------------------
# Names
# -----------------------------

def alternate_name(record: Mapping[str, Any]) -> Optional[str]:
    for field_name in ALTERNATE_NAME_FIELDS:
        value = record.get(field_name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def key_name(record: Mapping[str, Any]) -> str:
    """
    The name used for keying: the alternate name when present, else ``name``.
    Both are trimmed; casing is kept.
    """
    alt = alternate_name(record)
    if alt:
        return alt

    name = record.get("name")
    if not isinstance(name, str) or not name.strip():
        raise StructuralError(f"Record has no usable name: {_describe(record)}")
    return name.strip()


# -----------------------------
# Canonical keys
# -----------------------------

def canonical_key(record: Mapping[str, Any], *, source: Optional[str] = None) -> str:
    """
    Stable join key ``name|source``.

    ``source`` overrides the record's own source; variant templates derive
    theirs from ``inherits`` or ``type``. A record without a source is a
    structural error, never a default.
    """
    src = source if source is not None else record.get("source")
    if not isinstance(src, str) or not src:
        raise StructuralError(f"Record has no source: {_describe(record)}")
    return f"{key_name(record)}{KEY_SEPARATOR}{src}"


def abbreviation_key(record: Mapping[str, Any]) -> str:
    """Key for item properties and item types: ``abbreviation|source``."""
    abbr = record.get("abbreviation")
    src = record.get("source")
    if not isinstance(abbr, str) or not abbr.strip():
        raise StructuralError(f"Record has no abbreviation: {_describe(record)}")
    if not isinstance(src, str) or not src:
        raise StructuralError(f"Record has no source: {_describe(record)}")
    return f"{abbr.strip()}{KEY_SEPARATOR}{src}"


def id_key(record: Mapping[str, Any]) -> str:
    """Books carry their own id."""
    rid = record.get("id")
    if not isinstance(rid, str) or not rid:
        raise StructuralError(f"Record has no id: {_describe(record)}")
    return rid


def trailing_source(key: str) -> str:
    """Best-effort source fragment: the last ``|`` segment of a key."""
    return key.split(KEY_SEPARATOR)[-1] if key else ""


def escape_id(key: str) -> str:
    """File-name safe form of a key."""
    return key.replace(KEY_SEPARATOR, "@").replace("/", "__")


# -----------------------------
# reprintedAs normalization
# -----------------------------

def normalize_reprint_target(entry: Any) -> Optional[str]:
    """
    A reprintedAs entry is either a bare key string or ``{"uid": ..., "tag": ...}``.
    """
    if isinstance(entry, str):
        return entry.strip() or None
    if isinstance(entry, Mapping):
        uid = entry.get("uid")
        if isinstance(uid, str) and uid.strip():
            return uid.strip()
    return None


def normalize_reprinted_as(entries: Optional[Iterable[Any]]) -> List[str]:
    if not entries:
        return []
    out: List[str] = []
    for entry in entries:
        target = normalize_reprint_target(entry)
        if target:
            out.append(target)
    return out


def reprint_sources(entries: Optional[Iterable[Any]]) -> List[Dict[str, Any]]:
    """Sources parsed from reprint targets; such targets carry no page."""
    return [
        {"source": trailing_source(target), "page": 0}
        for target in normalize_reprinted_as(entries)
    ]


def _describe(record: Mapping[str, Any]) -> str:
    name = record.get("name") if isinstance(record, Mapping) else None
    return repr(name) if name else repr(dict(record))[:80]


__all__ = [
    "ALTERNATE_NAME_FIELDS",
    "KEY_SEPARATOR",
    "abbreviation_key",
    "alternate_name",
    "canonical_key",
    "escape_id",
    "id_key",
    "key_name",
    "normalize_reprint_target",
    "normalize_reprinted_as",
    "reprint_sources",
    "trailing_source",
]
