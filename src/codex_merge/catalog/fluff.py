"""
Fluff index.

Fluff records (flavor text and images) live in separate files and are keyed
like the records they describe. A fluff record may carry no content of its
own and point at another one through ``_copy``; such chains are resolved
with a visited set, so a cyclic chain ends instead of recursing forever.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Set

from codex_merge.core.exceptions import StructuralError
from codex_merge.i18n import merge_localized
from codex_merge.identity import canonical_key
from codex_merge.logger import get_logger

log = get_logger("fluff")

PRIMARY = "primary"
SECONDARY = "secondary"


def fluff_key(entry: Mapping[str, Any], fallback_source: Optional[str] = None) -> Optional[str]:
    source = entry.get("source") or fallback_source
    if not source:
        return None
    try:
        return canonical_key(entry, source=source)
    except StructuralError:
        return None


class FluffIndex:
    def __init__(self, primary_lang: str = "en", secondary_lang: str = "zh"):
        self.primary_lang = primary_lang
        self.secondary_lang = secondary_lang
        self.entries: Dict[str, Dict[str, Dict[str, Any]]] = {PRIMARY: {}, SECONDARY: {}}

    def add(self, side: str, records: Optional[Iterable[Mapping[str, Any]]]) -> int:
        added = 0
        for record in records or []:
            key = fluff_key(record)
            if key is None:
                continue
            self.entries[side][key] = dict(record)
            added += 1
        log.debug("fluff[%s]: indexed %d entries", side, added)
        return added

    def add_payloads(self, primary: Any, secondary: Any, list_name: str) -> None:
        for side, payload in ((PRIMARY, primary), (SECONDARY, secondary)):
            if isinstance(payload, Mapping):
                self.add(side, payload.get(list_name))

    def resolve(self, side: str, key: str, visited: Optional[Set[str]] = None) -> Optional[Dict[str, Any]]:
        visited = set() if visited is None else visited
        if key in visited:
            log.debug("fluff[%s]: _copy cycle at %s", side, key)
            return None
        visited.add(key)

        entry = self.entries[side].get(key)
        if entry is None:
            return None
        if entry.get("entries") or entry.get("images"):
            return entry

        copy_ref = entry.get("_copy")
        if isinstance(copy_ref, Mapping):
            copy_key = fluff_key(copy_ref, entry.get("source"))
            if copy_key is None:
                return entry
            return self.resolve(side, copy_key, visited) or entry
        return entry

    def content(self, side: str, key: str) -> Optional[Dict[str, Any]]:
        entry = self.resolve(side, key)
        if entry is None:
            return None
        entries, images = entry.get("entries"), entry.get("images")
        if not entries and not images:
            return None
        out: Dict[str, Any] = {}
        if entries is not None:
            out["entries"] = entries
        if images is not None:
            out["images"] = images
        return out

    def full(self, key: str) -> Optional[Dict[str, Any]]:
        """``{<primary>: content, <secondary>: content}`` or None when both are empty."""
        primary = self.content(PRIMARY, key)
        secondary = self.content(SECONDARY, key)
        if primary is None and secondary is None:
            return None
        if primary is not None and secondary is not None:
            secondary = merge_localized(primary, secondary)
        return {self.primary_lang: primary, self.secondary_lang: secondary}

    def __len__(self) -> int:
        return len(self.entries[PRIMARY]) + len(self.entries[SECONDARY])
