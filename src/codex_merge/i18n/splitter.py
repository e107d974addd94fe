"""
Record splitter.

Applies a collection-wide classification to one record pair and produces
three disjoint field groups: common, primary-only and secondary-only.

A localized field whose secondary value is missing receives a placeholder
(``empty_value``) so translators can see what is pending.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Set

from codex_merge.i18n.classifier import MISSING, KeySets, record_keys

Record = Optional[Mapping[str, Any]]


@dataclass
class SplitRecord:
    common: Dict[str, Any] = field(default_factory=dict)
    primary: Dict[str, Any] = field(default_factory=dict)
    secondary: Dict[str, Any] = field(default_factory=dict)


@dataclass
class GroupedBlock:
    """A sub-object split; every group is None when it would be empty."""
    common: Optional[Dict[str, Any]] = None
    primary: Optional[Dict[str, Any]] = None
    secondary: Optional[Dict[str, Any]] = None

    def is_empty(self) -> bool:
        return self.common is None and self.primary is None and self.secondary is None


def _place(
    key: str,
    p_val: Any,
    s_val: Any,
    localized: bool,
    out: SplitRecord,
    empty_value: Any,
) -> None:
    if localized:
        if p_val is not MISSING:
            out.primary[key] = p_val
        if s_val is not MISSING:
            out.secondary[key] = s_val
        elif p_val is not MISSING:
            out.secondary[key] = empty_value
    else:
        if p_val is not MISSING:
            out.common[key] = p_val
        elif s_val is not MISSING:
            out.common[key] = s_val


def split_record(
    primary: Record,
    secondary: Record,
    key_sets: KeySets,
    *,
    empty_value: Any = "",
    skip_keys: Iterable[str] = (),
) -> SplitRecord:
    skip: Set[str] = set(skip_keys)
    out = SplitRecord()

    for key in record_keys(primary, secondary):
        if key in skip:
            continue
        p_val = primary.get(key, MISSING) if primary else MISSING
        s_val = secondary.get(key, MISSING) if secondary else MISSING
        _place(key, p_val, s_val, key_sets.is_localized(key), out, empty_value)

    return out


def build_grouped_block(
    primary: Record,
    secondary: Record,
    keys: Iterable[str],
    localized_keys: Iterable[str],
    *,
    empty_value: Any = "",
) -> GroupedBlock:
    """
    Same per-field rule as ``split_record`` restricted to an ordered key
    subset (weapon or armor attributes, for instance).
    """
    localized = set(localized_keys)
    out = SplitRecord()

    for key in keys:
        p_val = primary.get(key, MISSING) if primary else MISSING
        s_val = secondary.get(key, MISSING) if secondary else MISSING
        if p_val is MISSING and s_val is MISSING:
            continue
        _place(key, p_val, s_val, key in localized, out, empty_value)

    return GroupedBlock(
        common=out.common or None,
        primary=out.primary or None,
        secondary=out.secondary or None,
    )


def merge_localized(primary: Any, secondary: Any) -> Any:
    """
    Overlay a secondary payload onto its primary counterpart.

    Dicts merge recursively, anything else (lists included) is replaced by the
    secondary value when one is given.
    """
    if secondary is None:
        return primary
    if isinstance(primary, Mapping) and isinstance(secondary, Mapping):
        merged = dict(primary)
        for key, s_val in secondary.items():
            p_val = primary.get(key)
            if isinstance(p_val, Mapping) and isinstance(s_val, Mapping):
                merged[key] = merge_localized(p_val, s_val)
            else:
                merged[key] = s_val
        return merged
    return secondary
