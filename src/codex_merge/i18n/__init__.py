from __future__ import annotations

from .classifier import KeyRules, KeySets, classify_keys, values_equal
from .splitter import (
    GroupedBlock,
    SplitRecord,
    build_grouped_block,
    merge_localized,
    split_record,
)

__all__ = [
    "GroupedBlock",
    "KeyRules",
    "KeySets",
    "SplitRecord",
    "build_grouped_block",
    "classify_keys",
    "merge_localized",
    "split_record",
    "values_equal",
]
