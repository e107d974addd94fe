"""
Catalog manager base.

Every content kind runs the same sequence over its pair of record lists:

    comparator -> reprint graph -> classifier (once) -> splitter (per record)

Subclasses pick the corpus lists, the key function and the title function,
and decorate each ``MergedRecord`` with their kind-specific blocks.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from codex_merge.core.anomalies import IDENTITY_COLLISION, LOCALIZATION_GAP
from codex_merge.core.context import RunContext
from codex_merge.core.exceptions import StructuralError
from codex_merge.entities import MergedRecord
from codex_merge.graph import ReprintGraph, record_sources
from codex_merge.i18n import KeySets, classify_keys, split_record
from codex_merge.identity import canonical_key
from codex_merge.logger import get_logger

Record = Dict[str, Any]

log = get_logger("catalog")


class CatalogManager:
    kind: str = ""
    data_type: str = ""
    corpus_file: str = ""
    list_names: Tuple[str, ...] = ()
    # Identity-guard namespace; defaults to the kind.
    namespace: Optional[str] = None
    # Kinds written one file per record as well as in the collection.
    per_record_dir: Optional[str] = None

    def __init__(self, ctx: RunContext):
        self.ctx = ctx
        self.primary: List[Record] = []
        self.secondary: List[Record] = []
        self.records: List[MergedRecord] = []
        self.graph: Optional[ReprintGraph] = None
        self.key_sets: Optional[KeySets] = None

    @property
    def name(self) -> str:
        return type(self).__name__

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def get_id(self, record: Mapping[str, Any]) -> str:
        return canonical_key(record)

    def get_title(self, record: Mapping[str, Any]) -> Optional[str]:
        return record.get("name")

    def sources_of(self, record: Mapping[str, Any]) -> List[Dict[str, Any]]:
        return record_sources(record)

    def payload(self, record: Mapping[str, Any]) -> Record:
        """Per-language view of a record before splitting."""
        return dict(record)

    def skip_keys(self) -> Iterable[str]:
        return ()

    def main_source(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        return {"source": record.get("source"), "page": record.get("page") or 0}

    def decorate(
        self,
        record: MergedRecord,
        primary: Record,
        secondary: Optional[Record],
    ) -> None:
        """Attach kind-specific blocks."""

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def extract(self, payload: Any) -> List[Record]:
        if not isinstance(payload, Mapping):
            return []
        out: List[Record] = []
        for list_name in self.list_names:
            out.extend(payload.get(list_name) or [])
        return out

    def compare(self) -> None:
        self.ctx.comparator.compare(
            self.kind,
            self.primary,
            self.secondary,
            get_id=self.get_id,
            get_primary_title=self.get_title,
        )

    def load(
        self,
        primary: Sequence[Record],
        secondary: Sequence[Record],
    ) -> List[MergedRecord]:
        self.primary = list(primary or [])
        self.secondary = list(secondary or [])

        self.compare()
        self.graph = ReprintGraph.build(
            self.primary, get_id=self.get_id, sources_of=self.sources_of
        )

        secondary_index = self.index(self.secondary)
        pairs = []
        for key, record in self.keyed(self.primary):
            counterpart = secondary_index.get(key)
            pairs.append(
                (
                    key,
                    record,
                    counterpart,
                    self.payload(record),
                    self.payload(counterpart) if counterpart is not None else None,
                )
            )
        self.key_sets = classify_keys(((p, s) for _, _, _, p, s in pairs), self.ctx.key_rules)

        self.records = []
        for key, primary, secondary, primary_payload, secondary_payload in pairs:
            if not self.ctx.guard.claim(self.namespace or self.kind, key, self.kind):
                self.ctx.anomalies.record(
                    self.name,
                    IDENTITY_COLLISION,
                    f"{key} already claimed by "
                    f"{self.ctx.guard.owner_of(self.namespace or self.kind, key)}",
                    key=key,
                )
                continue
            if secondary_payload is None:
                self.ctx.anomalies.record(
                    self.name,
                    LOCALIZATION_GAP,
                    f"no secondary counterpart for {key}",
                    key=key,
                )
            record = self.build_record(
                key,
                primary,
                secondary,
                primary_payload,
                secondary_payload,
            )
            self.records.append(record)

        log.info("[%s] merged %d records", self.kind, len(self.records))
        return self.records

    def keyed(self, records: Iterable[Record]) -> List[Tuple[str, Record]]:
        """Records with a computable key; the comparator already reported the rest."""
        out: List[Tuple[str, Record]] = []
        for record in records:
            try:
                out.append((self.get_id(record), record))
            except StructuralError:
                continue
        return out

    def index(self, records: Iterable[Record]) -> Dict[str, Record]:
        found: Dict[str, Record] = {}
        for key, record in self.keyed(records):
            found.setdefault(key, record)
        return found

    def build_record(
        self,
        key: str,
        primary: Record,
        secondary: Optional[Record],
        primary_payload: Record,
        secondary_payload: Optional[Record],
    ) -> MergedRecord:
        split = split_record(
            primary_payload,
            secondary_payload,
            self.key_sets,
            empty_value=self.ctx.empty_value,
            skip_keys=self.skip_keys(),
        )
        record = MergedRecord.from_split(
            self.data_type or self.kind,
            key,
            split,
            primary_name=self.get_title(primary),
            secondary_name=self.get_title(secondary) if secondary else None,
            main_source=self.main_source(primary),
            all_sources=self.graph.provenance(key),
            related_versions=self.graph.related_versions(key),
        )
        self.decorate(record, primary, secondary)
        return record

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def collection_name(self) -> str:
        return f"{self.kind}Collection"

    def to_collection(self) -> Dict[str, Any]:
        return {
            "type": self.collection_name(),
            "data": [
                r.to_dict(self.ctx.primary_lang, self.ctx.secondary_lang)
                for r in self.records
            ],
        }
