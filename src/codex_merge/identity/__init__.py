from __future__ import annotations

from .canonical_key import (
    ALTERNATE_NAME_FIELDS,
    abbreviation_key,
    alternate_name,
    canonical_key,
    escape_id,
    id_key,
    key_name,
    normalize_reprint_target,
    normalize_reprinted_as,
    reprint_sources,
    trailing_source,
)
from .guard import IdentityGuard

__all__ = [
    "ALTERNATE_NAME_FIELDS",
    "IdentityGuard",
    "abbreviation_key",
    "alternate_name",
    "canonical_key",
    "escape_id",
    "id_key",
    "key_name",
    "normalize_reprint_target",
    "normalize_reprinted_as",
    "reprint_sources",
    "trailing_source",
]
