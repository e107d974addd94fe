"""Item properties and item types, both keyed ``abbreviation|source``."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from codex_merge.catalog.base import CatalogManager, Record
from codex_merge.entities import MergedRecord
from codex_merge.identity import abbreviation_key


def property_name(record: Mapping[str, Any]) -> Optional[str]:
    """First named ``entries`` block, else ``name``, else ``abbreviation``."""
    entries = record.get("entries") or []
    if entries:
        first = entries[0]
        if isinstance(first, Mapping) and first.get("type") == "entries" and first.get("name"):
            return first["name"]
    return record.get("name") or record.get("abbreviation")


class ItemPropertyManager(CatalogManager):
    kind = "itemProperty"
    data_type = "itemProperty"
    corpus_file = "items-base.json"
    list_names = ("itemProperty",)

    def get_id(self, record: Mapping[str, Any]) -> str:
        return abbreviation_key(record)

    def get_title(self, record: Mapping[str, Any]) -> Optional[str]:
        return property_name(record)

    def payload(self, record: Mapping[str, Any]) -> Record:
        out = dict(record)
        out["name"] = property_name(record)
        out.setdefault("entries", [])
        return out

    def decorate(self, record: MergedRecord, primary: Record, secondary: Optional[Record]) -> None:
        record.set_extra("abbreviation", primary.get("abbreviation"))


class ItemTypeManager(CatalogManager):
    kind = "itemType"
    data_type = "itemType"
    corpus_file = "items-base.json"
    list_names = ("itemType",)

    def get_id(self, record: Mapping[str, Any]) -> str:
        return abbreviation_key(record)

    def decorate(self, record: MergedRecord, primary: Record, secondary: Optional[Record]) -> None:
        record.set_extra("abbreviation", primary.get("abbreviation"))
