from __future__ import annotations

from .reprint_graph import (
    ReprintGraph,
    SourceAccumulator,
    merge_sources,
    record_sources,
)

__all__ = [
    "ReprintGraph",
    "SourceAccumulator",
    "merge_sources",
    "record_sources",
]
