"""
Reprint graph.

Nodes are canonical keys; an edge ``source -> target`` exists for every entry
of a record's ``reprintedAs``. The reverse index (who reprints into me) is
built in the same pass, so reachability can walk both directions and collect
every historical and future edition of an entity.

The graph may contain cycles (a republication pointing back at an earlier
edition); traversal keeps a visited set and always terminates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set

from codex_merge.core.exceptions import StructuralError
from codex_merge.identity import (
    canonical_key,
    normalize_reprinted_as,
    reprint_sources,
    trailing_source,
)
from codex_merge.logger import get_logger

log = get_logger("reprint_graph")

Record = Dict[str, Any]
SourceRef = Dict[str, Any]


# ======================================================================
# Provenance helpers
# ======================================================================

def record_sources(record: Mapping[str, Any]) -> List[SourceRef]:
    """
    A record's own provenance: declared source/page, additionalSources,
    otherSources, then the sources implied by its reprint targets.
    """
    sources: List[SourceRef] = []
    if record.get("source"):
        sources.append({"source": record["source"], "page": record.get("page") or 0})
    for extra in record.get("additionalSources") or []:
        sources.append({"source": extra.get("source"), "page": extra.get("page") or 0})
    for extra in record.get("otherSources") or []:
        sources.append({"source": extra.get("source"), "page": extra.get("page") or 0})
    sources.extend(reprint_sources(record.get("reprintedAs")))
    return sources


class SourceAccumulator:
    """Ordered, ``source|page``-deduplicated list of source references."""

    def __init__(self) -> None:
        self._seen: Set[str] = set()
        self.sources: List[SourceRef] = []

    def add(self, source: Optional[str], page: Any = 0) -> None:
        if not source:
            return
        page = page or 0
        marker = f"{source}|{page}"
        if marker in self._seen:
            return
        self._seen.add(marker)
        self.sources.append({"source": source, "page": page})

    def extend(self, refs: Iterable[Mapping[str, Any]]) -> None:
        for ref in refs:
            self.add(ref.get("source"), ref.get("page"))


def merge_sources(*groups: Iterable[Mapping[str, Any]]) -> List[SourceRef]:
    acc = SourceAccumulator()
    for group in groups:
        acc.extend(group)
    return acc.sources


# ======================================================================
# Graph
# ======================================================================

@dataclass
class ReprintGraph:
    forward_edges: Dict[str, List[str]] = field(default_factory=dict)
    reverse_index: Dict[str, List[str]] = field(default_factory=dict)
    records: Dict[str, Record] = field(default_factory=dict)
    sources_of: Callable[[Mapping[str, Any]], List[SourceRef]] = record_sources

    @classmethod
    def build(
        cls,
        records: Iterable[Record],
        *,
        get_id: Callable[[Record], str] = canonical_key,
        get_targets: Optional[Callable[[Record], Iterable[Any]]] = None,
        sources_of: Callable[[Mapping[str, Any]], List[SourceRef]] = record_sources,
    ) -> "ReprintGraph":
        """
        Build forward edges and the reverse index in one pass.

        Records whose key cannot be computed are skipped; the caller is
        expected to have reported them already.
        """
        get_targets = get_targets or (lambda r: r.get("reprintedAs"))
        graph = cls(sources_of=sources_of)

        for record in records:
            try:
                key = get_id(record)
            except StructuralError as exc:
                log.debug("Skipping record without key: %s", exc)
                continue

            graph.records.setdefault(key, record)
            for target in normalize_reprinted_as(get_targets(record)):
                graph.forward_edges.setdefault(key, []).append(target)
                graph.reverse_index.setdefault(target, []).append(key)

        log.debug(
            "Reprint graph: nodes=%d edges=%d",
            len(graph.records),
            sum(len(v) for v in graph.forward_edges.values()),
        )
        return graph

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def neighbours(self, key: str) -> List[str]:
        return [*self.forward_edges.get(key, []), *self.reverse_index.get(key, [])]

    def reachable(self, start: str) -> List[str]:
        """
        Every key connected to ``start`` through forward or reverse edges,
        ``start`` included, in depth-first visit order.
        """
        visited: Dict[str, None] = {}
        stack = [start]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited[current] = None
            for nxt in self.neighbours(current):
                if nxt not in visited:
                    stack.append(nxt)
        return list(visited)

    def reachable_set(self, start: str) -> Set[str]:
        return set(self.reachable(start))

    def related_versions(self, key: str) -> Optional[List[str]]:
        others = [k for k in self.reachable(key) if k != key]
        return others or None

    def aggregate_sources(self, keys: Iterable[str]) -> List[SourceRef]:
        """
        Provenance of a set of keys, deduplicated on ``source|page``.

        Keys with no record (a reprint target living in another corpus, or
        never published in this one) contribute their trailing source
        fragment with page 0.
        """
        acc = SourceAccumulator()
        for key in keys:
            record = self.records.get(key)
            if record is None:
                acc.add(trailing_source(key), 0)
                continue
            acc.extend(self.sources_of(record))
        return acc.sources

    def provenance(self, key: str) -> List[SourceRef]:
        return self.aggregate_sources(self.reachable(key))
