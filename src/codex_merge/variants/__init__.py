from __future__ import annotations

from .engine import (
    DEFAULT_SOURCE_PRIORITY,
    ExpansionResult,
    VariantExpansionEngine,
    VariantSettings,
    derived_name,
    effective_entries,
    effective_page,
    effective_source,
    template_key,
)
from .predicates import (
    BOOLEAN,
    CASE_INSENSITIVE,
    EXACT,
    MEMBERSHIP,
    TYPE_CODE,
    is_generic_weapon_requirement,
    matches_constraint,
    matches_excludes,
    matches_requires,
    matches_value,
    strategy_for,
)

__all__ = [
    "BOOLEAN",
    "CASE_INSENSITIVE",
    "DEFAULT_SOURCE_PRIORITY",
    "EXACT",
    "MEMBERSHIP",
    "TYPE_CODE",
    "ExpansionResult",
    "VariantExpansionEngine",
    "VariantSettings",
    "derived_name",
    "effective_entries",
    "effective_page",
    "effective_source",
    "is_generic_weapon_requirement",
    "matches_constraint",
    "matches_excludes",
    "matches_requires",
    "matches_value",
    "strategy_for",
    "template_key",
]
