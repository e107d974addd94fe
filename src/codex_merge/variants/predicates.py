"""
Constraint predicates for variant templates.

A template's ``requires`` is a list of constraint objects (logical OR); each
constraint object is a mapping of field -> expected value that holds only
when every field matches (logical AND). ``excludes`` is a single constraint
object.

Every field comparison goes through one of a small closed set of named
strategies, picked from the expected value and the field name:

* ``MEMBERSHIP``        list expectation; any expected value present in (or
                        equal to) the actual value
* ``BOOLEAN``           boolean expectation; compared by truthiness
* ``CASE_INSENSITIVE``  ``name``, ``source`` and ``weaponCategory``
* ``TYPE_CODE``         bare ``type`` expectation without a ``|source``
                        suffix; compared against the type code alone
* ``EXACT``             everything else; strict equality, so a list-valued
                        attribute never equals a scalar expectation
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Sequence

from codex_merge.i18n.classifier import MISSING

EXACT = "exact"
CASE_INSENSITIVE = "case_insensitive"
MEMBERSHIP = "membership"
BOOLEAN = "boolean"
TYPE_CODE = "type_code"

CASE_INSENSITIVE_FIELDS = frozenset({"name", "source", "weaponCategory"})

# Default allow-list for the bare {"weapon": true} requirement.
DEFAULT_GENERIC_WEAPON_TYPE_CODES = frozenset({"M", "R"})


def type_code(value: Any) -> Optional[str]:
    """``"M|XPHB"`` -> ``"M"``; non-strings yield None."""
    if not isinstance(value, str) or not value:
        return None
    return value.split("|", 1)[0]


def strategy_for(field_name: str, expected: Any) -> str:
    if isinstance(expected, (list, tuple)):
        return MEMBERSHIP
    if isinstance(expected, bool):
        return BOOLEAN
    if field_name in CASE_INSENSITIVE_FIELDS and isinstance(expected, str):
        return CASE_INSENSITIVE
    if field_name == "type" and isinstance(expected, str) and "|" not in expected:
        return TYPE_CODE
    return EXACT


def _strict_equal(actual: Any, expected: Any) -> bool:
    # True == 1 in Python; a flag never equals a number here.
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    return actual == expected


def _matches_scalar(field_name: str, actual: Any, expected: Any) -> bool:
    strategy = strategy_for(field_name, expected)
    if strategy == CASE_INSENSITIVE:
        return isinstance(actual, str) and actual.lower() == expected.lower()
    if strategy == TYPE_CODE:
        # "HA|XPHB" carries its source; a bare "HA" names the code only.
        return type_code(actual) == expected
    return _strict_equal(actual, expected)


def matches_value(field_name: str, actual: Any, expected: Any) -> bool:
    """Pure comparison of one base-entity attribute against one expectation."""
    strategy = strategy_for(field_name, expected)

    if strategy == BOOLEAN:
        truthy = actual is not MISSING and bool(actual)
        return truthy == expected

    if actual is MISSING:
        return False

    if strategy == MEMBERSHIP:
        actual_values = actual if isinstance(actual, (list, tuple)) else [actual]
        return any(
            _matches_scalar(field_name, a, e) for e in expected for a in actual_values
        )

    return _matches_scalar(field_name, actual, expected)


def matches_constraint(base: Mapping[str, Any], constraint: Mapping[str, Any]) -> bool:
    """Every key of ``constraint`` must match the base entity."""
    for field_name, expected in constraint.items():
        if not matches_value(field_name, base.get(field_name, MISSING), expected):
            return False
    return True


# -----------------------------------------------------------------------------
# requires / excludes
# -----------------------------------------------------------------------------

def is_generic_weapon_requirement(requires: Any) -> bool:
    """True for exactly ``[{"weapon": true}]``."""
    if not isinstance(requires, (list, tuple)) or len(requires) != 1:
        return False
    only = requires[0]
    return isinstance(only, Mapping) and len(only) == 1 and only.get("weapon") is True


def matches_generic_weapon(
    base: Mapping[str, Any],
    type_codes: Iterable[str] = DEFAULT_GENERIC_WEAPON_TYPE_CODES,
) -> bool:
    return type_code(base.get("type")) in set(type_codes)


def matches_requires(
    base: Mapping[str, Any],
    requires: Optional[Sequence[Mapping[str, Any]]],
    *,
    generic_weapon_type_codes: Iterable[str] = DEFAULT_GENERIC_WEAPON_TYPE_CODES,
) -> bool:
    """
    OR over the constraint objects. A template without ``requires`` matches
    nothing; it is emitted on its own.
    """
    if not requires:
        return False
    if is_generic_weapon_requirement(requires):
        return matches_generic_weapon(base, generic_weapon_type_codes)
    return any(
        matches_constraint(base, constraint)
        for constraint in requires
        if isinstance(constraint, Mapping)
    )


def matches_excludes(base: Mapping[str, Any], excludes: Optional[Mapping[str, Any]]) -> bool:
    if not excludes:
        return False
    return matches_constraint(base, excludes)
