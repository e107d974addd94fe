"""
Merged output record.

One ``MergedRecord`` is produced per canonical key and content kind. It is a
structured envelope around the three field groups of the record splitter
plus the identity and provenance metadata every kind shares:

    dataType / uid / id
    displayName      {<primary>: str, <secondary>: str | None}
    mainSource       {source, page}
    allSources       [{source, page}, ...]
    relatedVersions  [key, ...]          (omitted when empty)
    <common fields>                      (merged at top level)
    <kind extras>                        (grouped blocks, fluff, headers, ...)
    <primary>        {localized fields}
    <secondary>      {localized fields, placeholders where untranslated}

Language codes are not baked in; ``to_dict`` receives them from configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from codex_merge.i18n.splitter import SplitRecord

# Envelope keys common fields may never overwrite.
RESERVED_KEYS = frozenset(
    {
        "dataType",
        "uid",
        "id",
        "displayName",
        "mainSource",
        "allSources",
        "relatedVersions",
    }
)


def display_name_pair(primary_name: Any, secondary_name: Any) -> Optional[str]:
    """Secondary display name, or None when absent or identical to primary."""
    if not isinstance(secondary_name, str) or not secondary_name.strip():
        return None
    if isinstance(primary_name, str) and secondary_name.strip() == primary_name.strip():
        return None
    return secondary_name


@dataclass
class MergedRecord:
    data_type: str
    id: str
    primary_name: Optional[str]
    secondary_name: Optional[str] = None
    main_source: Dict[str, Any] = field(default_factory=dict)
    all_sources: List[Dict[str, Any]] = field(default_factory=list)
    related_versions: Optional[List[str]] = None
    common: Dict[str, Any] = field(default_factory=dict)
    primary: Dict[str, Any] = field(default_factory=dict)
    secondary: Optional[Dict[str, Any]] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def uid(self) -> str:
        return f"{self.data_type}_{self.id}"

    # ------------------------------------------------------------------
    # Dict-like helpers
    # ------------------------------------------------------------------
    def get(self, key: str, default: Any = None) -> Any:
        """Look a field up in extras, then in the common payload."""
        if key in self.extras:
            return self.extras[key]
        return self.common.get(key, default)

    def set_extra(self, key: str, value: Any) -> None:
        """Attach a kind-specific block; None values are dropped."""
        if value is None:
            self.extras.pop(key, None)
            return
        self.extras[key] = value

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self, primary_lang: str = "en", secondary_lang: str = "zh") -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "dataType": self.data_type,
            "uid": self.uid,
            "id": self.id,
            "displayName": {
                primary_lang: self.primary_name,
                secondary_lang: self.secondary_name,
            },
            "mainSource": dict(self.main_source),
            "allSources": [dict(s) for s in self.all_sources],
        }
        if self.related_versions:
            out["relatedVersions"] = list(self.related_versions)

        for key, value in self.common.items():
            if key not in RESERVED_KEYS and key not in (primary_lang, secondary_lang):
                out[key] = value
        for key, value in self.extras.items():
            if key not in RESERVED_KEYS:
                out[key] = value

        out[primary_lang] = self.primary
        out[secondary_lang] = self.secondary
        return out

    # ------------------------------------------------------------------
    # Factory helper
    # ------------------------------------------------------------------
    @classmethod
    def from_split(
        cls,
        data_type: str,
        key: str,
        split: SplitRecord,
        *,
        primary_name: Optional[str],
        secondary_name: Optional[str] = None,
        main_source: Optional[Dict[str, Any]] = None,
        all_sources: Optional[List[Dict[str, Any]]] = None,
        related_versions: Optional[List[str]] = None,
    ) -> "MergedRecord":
        return cls(
            data_type=data_type,
            id=key,
            primary_name=primary_name,
            secondary_name=display_name_pair(primary_name, secondary_name),
            main_source=dict(main_source or {}),
            all_sources=list(all_sources or []),
            related_versions=related_versions,
            common=split.common,
            primary=split.primary,
            secondary=split.secondary,
        )
