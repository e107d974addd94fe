"""
Spells.

Spells are spread over one file per source, listed in ``spells/index.json``.
All files are loaded before the manager runs, so comparison, the reprint
graph and field classification see the whole spell corpus at once.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from codex_merge.catalog.base import CatalogManager, Record
from codex_merge.catalog.fluff import FluffIndex
from codex_merge.core.context import RunContext
from codex_merge.entities import MergedRecord

SPELL_LIST_FIELDS = (
    "spellAttack",
    "abilityCheck",
    "damageInflict",
    "damageVulnerable",
    "conditionInflict",
    "damageResist",
    "damageImmune",
    "conditionImmune",
    "savingThrow",
    "affectsCreatureType",
)


class SpellManager(CatalogManager):
    kind = "spell"
    data_type = "spell"
    corpus_file = "spells/index.json"
    list_names = ("spell",)
    per_record_dir = "spell"

    def __init__(
        self,
        ctx: RunContext,
        fluff: Optional[FluffIndex] = None,
        class_lists: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(ctx)
        self.fluff = fluff
        self.class_lists: Mapping[str, Any] = class_lists or {}

    def classes_of(self, record: Mapping[str, Any]) -> Optional[List[Any]]:
        by_source = self.class_lists.get(record.get("source")) or {}
        entry = by_source.get(record.get("name")) if isinstance(by_source, Mapping) else None
        if isinstance(entry, Mapping):
            return entry.get("class")
        return None

    def decorate(self, record: MergedRecord, primary: Record, secondary: Optional[Record]) -> None:
        meta = primary.get("meta") if isinstance(primary.get("meta"), Mapping) else {}
        record.set_extra("level", primary.get("level"))
        record.set_extra("school", primary.get("school"))
        record.set_extra("ritual", bool(meta.get("ritual", False)))
        for field_name in SPELL_LIST_FIELDS:
            record.set_extra(field_name, list(primary.get(field_name) or []))
        record.set_extra("classes", self.classes_of(primary))
        if self.fluff is not None:
            record.set_extra("full", self.fluff.full(record.id))


def spell_files(index: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """``{source: file name}`` from a spell index, skipping blank entries."""
    if not isinstance(index, Mapping):
        return {}
    return {source: path for source, path in index.items() if isinstance(path, str) and path}
