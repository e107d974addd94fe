from __future__ import annotations

from .comparator import ComparisonEntry, CorpusComparator, KindComparison

__all__ = [
    "ComparisonEntry",
    "CorpusComparator",
    "KindComparison",
]
