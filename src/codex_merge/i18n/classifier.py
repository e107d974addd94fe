"""
Localization field classifier.

Decides, per field name and across a whole collection of (primary, secondary)
record pairs, whether a field is *localized* (each language keeps its own
value) or *common* (one shared value).

A field is localized as soon as one pair in the collection disagrees on it,
a value present on one side and absent on the other included. Force-lists
override the heuristic: ``force_common`` always wins, ``force_localized`` is
always localized. Localization is a property of the field across the corpus,
so classification runs once per collection, never per record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

from codex_merge.logger import get_logger

log = get_logger("i18n_classifier")

Record = Optional[Mapping[str, Any]]
RecordPair = Tuple[Record, Record]

# Distinguishes an absent key from an explicit JSON null.
MISSING = object()


@dataclass(frozen=True)
class KeyRules:
    force_localized: FrozenSet[str] = frozenset()
    force_common: FrozenSet[str] = frozenset()
    weapon_keys: Tuple[str, ...] = ()
    armor_keys: Tuple[str, ...] = ()

    @classmethod
    def from_config(cls, section: Optional[Mapping[str, Any]]) -> "KeyRules":
        section = section or {}
        return cls(
            force_localized=frozenset(section.get("force_localized_keys") or ()),
            force_common=frozenset(section.get("force_common_keys") or ()),
            weapon_keys=tuple(section.get("weapon_keys") or ()),
            armor_keys=tuple(section.get("armor_keys") or ()),
        )


@dataclass(frozen=True)
class KeySets:
    all_keys: FrozenSet[str] = frozenset()
    localized_keys: FrozenSet[str] = frozenset()
    common_keys: FrozenSet[str] = frozenset()

    def is_localized(self, key: str) -> bool:
        return key in self.localized_keys

    def apply_overrides(
        self,
        *,
        force_localized: Iterable[str] = (),
        force_common: Iterable[str] = (),
    ) -> "KeySets":
        """Re-apply force-lists on top of an existing classification."""
        localized = set(self.localized_keys) | set(force_localized)
        localized -= set(force_common)
        return _finalize(set(self.all_keys), localized)


# -----------------------------------------------------------------------------
# Deep equality
# -----------------------------------------------------------------------------

def values_equal(a: Any, b: Any) -> bool:
    """
    Strict deep equality over JSON-like values.

    Unlike ``==`` this keeps ``True`` and ``1`` apart and treats an absent
    value as different from everything but another absent value.
    """
    if a is MISSING or b is MISSING:
        return a is b
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(values_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(values_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, (Mapping, list, tuple)) or isinstance(b, (Mapping, list, tuple)):
        return False
    return a == b


def record_keys(primary: Record, secondary: Record) -> List[str]:
    """Field names of both sides, primary order first."""
    keys: Dict[str, None] = {}
    for side in (primary, secondary):
        if side:
            for key in side.keys():
                keys[key] = None
    return list(keys)


# -----------------------------------------------------------------------------
# Classification
# -----------------------------------------------------------------------------

def classify_keys(pairs: Iterable[RecordPair], rules: KeyRules) -> KeySets:
    all_keys: Set[str] = set()
    diff_keys: Set[str] = set()
    forced = rules.force_localized | rules.force_common
    pair_count = 0

    for primary, secondary in pairs:
        pair_count += 1
        for key in record_keys(primary, secondary):
            all_keys.add(key)
            if key in forced or key in diff_keys:
                continue
            p_val = primary.get(key, MISSING) if primary else MISSING
            s_val = secondary.get(key, MISSING) if secondary else MISSING
            if not values_equal(p_val, s_val):
                diff_keys.add(key)

    localized = (diff_keys | set(rules.force_localized)) - set(rules.force_common)
    result = _finalize(all_keys, localized)

    log.debug(
        "classify_keys: pairs=%d keys=%d localized=%d common=%d",
        pair_count,
        len(result.all_keys),
        len(result.localized_keys),
        len(result.common_keys),
    )
    return result


def _finalize(all_keys: Set[str], localized: Set[str]) -> KeySets:
    return KeySets(
        all_keys=frozenset(all_keys),
        localized_keys=frozenset(localized),
        common_keys=frozenset(k for k in all_keys if k not in localized),
    )

