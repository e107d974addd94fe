"""
Variant expansion engine.

Expands sparse variant templates (``requires`` / ``excludes`` / ``inherits``)
into concrete derived entities by matching them against the base-entity
catalog.

Per template
------------
1. Normalize: effective source, page, entries and reprint targets.
2. Emit the template itself as a merged record, even with zero matches.
3. Match ``requires`` (OR of constraint objects) against every base entity.
4. Drop candidates that satisfy ``excludes``.
5. Stable-sort by source priority, keep the first candidate per derived
   display name (case-insensitive).
6. Merge template overrides onto the base, once per language.
7. Refuse derived keys already claimed in the run's identity space.

Field classification runs once over all template pairs and once over all
derived pairs; never per record.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from codex_merge.core.anomalies import (
    CROSS_REFERENCE,
    IDENTITY_COLLISION,
    LOCALIZATION_GAP,
    STRUCTURAL,
    UNMATCHED_VARIANT,
    AnomalyLog,
)
from codex_merge.core.exceptions import StructuralError
from codex_merge.entities import MergedRecord
from codex_merge.graph import ReprintGraph, merge_sources, record_sources
from codex_merge.i18n import KeyRules, classify_keys, split_record
from codex_merge.identity import (
    ALTERNATE_NAME_FIELDS,
    IdentityGuard,
    canonical_key,
    reprint_sources,
    trailing_source,
)
from codex_merge.logger import get_logger
from codex_merge.variants.predicates import (
    DEFAULT_GENERIC_WEAPON_TYPE_CODES,
    matches_excludes,
    matches_requires,
)

log = get_logger("variant_engine")

Record = Dict[str, Any]

DEFAULT_SOURCE_PRIORITY = ("XPHB", "XDMG", "PHB", "DMG")

# inherits fields never copied onto a derived record as-is.
MERGE_BLOCK_LIST = frozenset(
    {
        "name",
        *ALTERNATE_NAME_FIELDS,
        "type",
        "source",
        "page",
        "requires",
        "excludes",
        "inherits",
        "reprintedAs",
        "entries",
        "namePrefix",
        "nameSuffix",
    }
)


# ======================================================================
# Settings
# ======================================================================

@dataclass(frozen=True)
class VariantSettings:
    source_priority: Tuple[str, ...] = DEFAULT_SOURCE_PRIORITY
    generic_weapon_type_codes: FrozenSet[str] = DEFAULT_GENERIC_WEAPON_TYPE_CODES

    @classmethod
    def from_config(cls, section: Optional[Mapping[str, Any]]) -> "VariantSettings":
        section = section or {}
        priority = section.get("source_priority")
        codes = section.get("generic_weapon_type_codes")
        return cls(
            source_priority=tuple(priority) if priority else DEFAULT_SOURCE_PRIORITY,
            generic_weapon_type_codes=(
                frozenset(codes) if codes else DEFAULT_GENERIC_WEAPON_TYPE_CODES
            ),
        )

    def priority_of(self, source: Any) -> int:
        try:
            return self.source_priority.index(source)
        except ValueError:
            return len(self.source_priority)


# ======================================================================
# Template normalization
# ======================================================================

def _inherits(template: Mapping[str, Any]) -> Mapping[str, Any]:
    value = template.get("inherits")
    return value if isinstance(value, Mapping) else {}


def effective_source(template: Mapping[str, Any]) -> str:
    src = template.get("source") or _inherits(template).get("source")
    if src:
        return src
    return trailing_source(template.get("type") or "")


def effective_page(template: Mapping[str, Any]) -> Any:
    return template.get("page") or _inherits(template).get("page") or 0


def effective_entries(template: Mapping[str, Any]) -> List[Any]:
    entries = template.get("entries")
    if entries:
        return entries
    return _inherits(template).get("entries") or []


def effective_reprints(template: Mapping[str, Any]) -> Any:
    return template.get("reprintedAs") or _inherits(template).get("reprintedAs")


def template_key(template: Mapping[str, Any]) -> str:
    return canonical_key(template, source=effective_source(template) or None)


def template_sources(template: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Provenance of one template, reported with its effective source/page."""
    sources = [{"source": effective_source(template), "page": effective_page(template)}]
    for holder in (template, _inherits(template)):
        for list_name in ("additionalSources", "otherSources"):
            for extra in holder.get(list_name) or []:
                if isinstance(extra, Mapping):
                    sources.append(
                        {"source": extra.get("source"), "page": extra.get("page") or 0}
                    )
    sources.extend(reprint_sources(effective_reprints(template)))
    return sources


def derived_name(template: Optional[Mapping[str, Any]], base: Mapping[str, Any]) -> str:
    inherits = _inherits(template) if template else {}
    prefix = inherits.get("namePrefix") or ""
    suffix = inherits.get("nameSuffix") or ""
    base_name = base.get("name")
    base_name = base_name.strip() if isinstance(base_name, str) else ""
    return f"{prefix}{base_name}{suffix}"


@dataclass
class NormalizedTemplate:
    key: str
    record: Record
    secondary: Optional[Record]
    source: str
    page: Any
    entries: List[Any]

    def payload(self, record: Mapping[str, Any]) -> Record:
        """Template fields with entries resolved through inherits."""
        out = dict(record)
        out["entries"] = effective_entries(record)
        return out


@dataclass
class Derivation:
    key: str
    template_key: str
    base_key: str
    primary: Record
    secondary: Optional[Record]
    sources: List[Dict[str, Any]]


@dataclass
class ExpansionResult:
    templates: List[MergedRecord] = field(default_factory=list)
    derived: List[MergedRecord] = field(default_factory=list)

    def all(self) -> List[MergedRecord]:
        return [*self.templates, *self.derived]


# ======================================================================
# Engine
# ======================================================================

class VariantExpansionEngine:
    """
    One engine per run. Identity guard and anomaly log are owned by the run
    and shared with the other catalog managers.
    """

    def __init__(
        self,
        *,
        guard: IdentityGuard,
        anomalies: AnomalyLog,
        settings: Optional[VariantSettings] = None,
        rules: Optional[KeyRules] = None,
        empty_value: Any = "",
        namespace: str = "item",
        data_type: str = "item",
    ):
        self.guard = guard
        self.anomalies = anomalies
        self.settings = settings or VariantSettings()
        self.rules = rules or KeyRules()
        self.empty_value = empty_value
        self.namespace = namespace
        self.data_type = data_type

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------
    def normalize(
        self,
        templates: Iterable[Record],
        secondary_templates: Iterable[Record] = (),
    ) -> List[NormalizedTemplate]:
        secondary_index: Dict[str, Record] = {}
        for record in secondary_templates or []:
            try:
                secondary_index.setdefault(template_key(record), record)
            except StructuralError:
                continue

        normalized: List[NormalizedTemplate] = []
        for record in templates or []:
            try:
                key = template_key(record)
            except StructuralError as exc:
                self.anomalies.record("VariantEngine", STRUCTURAL, str(exc))
                continue
            normalized.append(
                NormalizedTemplate(
                    key=key,
                    record=record,
                    secondary=secondary_index.get(key),
                    source=effective_source(record),
                    page=effective_page(record),
                    entries=effective_entries(record),
                )
            )
        return normalized

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------
    def candidates(self, template: Mapping[str, Any], bases: Sequence[Record]) -> List[Record]:
        requires = template.get("requires")
        excludes = template.get("excludes")
        matched = [
            base
            for base in bases
            if matches_requires(
                base,
                requires,
                generic_weapon_type_codes=self.settings.generic_weapon_type_codes,
            )
        ]
        return [base for base in matched if not matches_excludes(base, excludes)]

    def select(self, template: Mapping[str, Any], candidates: Sequence[Record]) -> List[Record]:
        """Source-priority order, first candidate per derived display name."""
        ordered = sorted(
            candidates, key=lambda base: self.settings.priority_of(base.get("source"))
        )
        seen: Dict[str, None] = {}
        selected: List[Record] = []
        for base in ordered:
            name = derived_name(template, base).lower()
            if name in seen:
                continue
            seen[name] = None
            selected.append(base)
        return selected

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------
    def merge(
        self,
        template: Mapping[str, Any],
        base: Mapping[str, Any],
        *,
        name: str,
        source: str,
        page: Any,
        base_key: str,
        origin: str,
        alternate_name: Optional[str] = None,
    ) -> Record:
        derived: Record = copy.deepcopy(dict(base))
        for field_name in ALTERNATE_NAME_FIELDS:
            derived.pop(field_name, None)

        for field_name, value in _inherits(template).items():
            if field_name in MERGE_BLOCK_LIST or value is None:
                continue
            derived[field_name] = copy.deepcopy(value)

        derived["name"] = name
        if alternate_name:
            derived[ALTERNATE_NAME_FIELDS[0]] = alternate_name
        derived["source"] = source
        derived["page"] = page
        if "type" in base:
            derived["type"] = base["type"]
        derived["entries"] = copy.deepcopy(effective_entries(template))
        derived["baseItem"] = base_key
        derived["origin"] = origin
        return derived

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------
    def expand(
        self,
        templates: Sequence[Record],
        secondary_templates: Sequence[Record],
        bases: Sequence[Record],
        secondary_bases: Sequence[Record] = (),
    ) -> ExpansionResult:
        normalized = self.normalize(templates, secondary_templates)
        graph = ReprintGraph.build(
            [t.record for t in normalized],
            get_id=template_key,
            get_targets=effective_reprints,
            sources_of=template_sources,
        )

        result = ExpansionResult()
        result.templates = self._emit_templates(normalized, graph)

        secondary_base_index: Dict[str, Record] = {}
        for record in secondary_bases or []:
            try:
                secondary_base_index.setdefault(canonical_key(record), record)
            except StructuralError:
                continue

        derivations: List[Derivation] = []
        for template in normalized:
            derivations.extend(
                self._derive(template, bases, secondary_base_index, graph)
            )
        result.derived = self._emit_derived(derivations)

        log.info(
            "Variant expansion: templates=%d derived=%d",
            len(result.templates),
            len(result.derived),
        )
        return result

    def _emit_templates(
        self, normalized: Sequence[NormalizedTemplate], graph: ReprintGraph
    ) -> List[MergedRecord]:
        pairs = [
            (t.payload(t.record), t.payload(t.secondary) if t.secondary else None)
            for t in normalized
        ]
        key_sets = classify_keys(pairs, self.rules)

        records: List[MergedRecord] = []
        for template, (primary, secondary) in zip(normalized, pairs):
            if not self.guard.claim(self.namespace, template.key, "magicvariant"):
                self.anomalies.record(
                    "VariantEngine",
                    IDENTITY_COLLISION,
                    f"template {template.key} already claimed by "
                    f"{self.guard.owner_of(self.namespace, template.key)}",
                    key=template.key,
                )
                continue
            if secondary is None:
                self.anomalies.record(
                    "VariantEngine",
                    LOCALIZATION_GAP,
                    f"no secondary template for {template.key}",
                    key=template.key,
                )

            split = split_record(primary, secondary, key_sets, empty_value=self.empty_value)
            record = MergedRecord.from_split(
                self.data_type,
                template.key,
                split,
                primary_name=template.record.get("name"),
                secondary_name=secondary.get("name") if secondary else None,
                main_source={"source": template.source, "page": template.page},
                all_sources=graph.provenance(template.key),
                related_versions=graph.related_versions(template.key),
            )
            record.set_extra("isBaseItem", False)
            record.set_extra(
                "rarity",
                _inherits(template.record).get("rarity") or template.record.get("rarity"),
            )
            records.append(record)
        return records

    def _derive(
        self,
        template: NormalizedTemplate,
        bases: Sequence[Record],
        secondary_base_index: Mapping[str, Record],
        graph: ReprintGraph,
    ) -> List[Derivation]:
        if not template.record.get("requires"):
            return []

        selected = self.select(template.record, self.candidates(template.record, bases))
        if not selected:
            self.anomalies.record(
                "VariantEngine",
                UNMATCHED_VARIANT,
                f"template {template.key} matched no base entity",
                key=template.key,
            )
            return []

        template_provenance = graph.provenance(template.key)
        out: List[Derivation] = []
        for base in selected:
            try:
                base_key = canonical_key(base)
            except StructuralError as exc:
                self.anomalies.record("VariantEngine", STRUCTURAL, str(exc))
                continue

            name = derived_name(template.record, base)
            primary = self.merge(
                template.record,
                base,
                name=name,
                source=template.source,
                page=template.page,
                base_key=base_key,
                origin=template.key,
            )
            key = canonical_key(primary)

            if not self.guard.claim(self.namespace, key, template.key):
                self.anomalies.record(
                    "VariantEngine",
                    IDENTITY_COLLISION,
                    f"derived {key} from {template.key} already claimed by "
                    f"{self.guard.owner_of(self.namespace, key)}",
                    key=key,
                )
                continue

            secondary = None
            secondary_base = secondary_base_index.get(base_key)
            if secondary_base is None:
                self.anomalies.record(
                    "VariantEngine",
                    CROSS_REFERENCE,
                    f"no secondary base {base_key} for derived {key}",
                    key=key,
                )
            else:
                secondary_template = template.secondary or template.record
                secondary = self.merge(
                    secondary_template,
                    secondary_base,
                    name=derived_name(secondary_template, secondary_base),
                    source=template.source,
                    page=template.page,
                    base_key=base_key,
                    origin=template.key,
                    alternate_name=name,
                )

            out.append(
                Derivation(
                    key=key,
                    template_key=template.key,
                    base_key=base_key,
                    primary=primary,
                    secondary=secondary,
                    sources=merge_sources(template_provenance, record_sources(base)),
                )
            )
        return out

    def _emit_derived(self, derivations: Sequence[Derivation]) -> List[MergedRecord]:
        key_sets = classify_keys(
            ((d.primary, d.secondary) for d in derivations), self.rules
        )

        records: List[MergedRecord] = []
        for d in derivations:
            split = split_record(
                d.primary, d.secondary, key_sets, empty_value=self.empty_value
            )
            record = MergedRecord.from_split(
                self.data_type,
                d.key,
                split,
                primary_name=d.primary.get("name"),
                secondary_name=d.secondary.get("name") if d.secondary else None,
                main_source={"source": d.primary["source"], "page": d.primary["page"]},
                all_sources=d.sources,
            )
            record.set_extra("isBaseItem", False)
            record.set_extra("baseItem", d.base_key)
            record.set_extra("origin", d.template_key)
            records.append(record)
        return records


__all__ = [
    "DEFAULT_SOURCE_PRIORITY",
    "MERGE_BLOCK_LIST",
    "Derivation",
    "ExpansionResult",
    "NormalizedTemplate",
    "VariantExpansionEngine",
    "VariantSettings",
    "derived_name",
    "effective_entries",
    "effective_page",
    "effective_reprints",
    "effective_source",
    "template_key",
    "template_sources",
]
