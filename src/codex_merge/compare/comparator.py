"""
Cross-corpus comparator.

Classifies every canonical key of a content kind as matched, present only in
the primary corpus (needs a secondary translation) or present only in the
secondary corpus (needs a primary counterpart), and accumulates a per-run
audit dataset plus worksheet rows for a human-reviewable report.

Key equality is exact string equality; there is no fuzzy matching.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from openpyxl import Workbook

from codex_merge.core.anomalies import STRUCTURAL, AnomalyLog
from codex_merge.core.exceptions import StructuralError
from codex_merge.logger import get_logger

log = get_logger("comparator")

Record = Dict[str, Any]
GetId = Callable[[Record], str]
GetTitle = Callable[[Record], Optional[str]]


@dataclass(slots=True)
class ComparisonEntry:
    id: str
    primary_title: Optional[str]
    secondary_title: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "primaryTitle": self.primary_title,
            "secondaryTitle": self.secondary_title,
        }

    def to_row(self) -> List[str]:
        return [self.id, self.primary_title or "", self.secondary_title or ""]


@dataclass
class KindComparison:
    matched: List[ComparisonEntry] = field(default_factory=list)
    need_primary: List[ComparisonEntry] = field(default_factory=list)
    need_secondary: List[ComparisonEntry] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        return {
            "matched": len(self.matched),
            "needPrimary": len(self.need_primary),
            "needSecondary": len(self.need_secondary),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matched": [e.to_dict() for e in self.matched],
            "needPrimary": [e.to_dict() for e in self.need_primary],
            "needSecondary": [e.to_dict() for e in self.need_secondary],
        }


class CorpusComparator:
    """
    Owned by a single run; shared by every catalog manager of that run.
    """

    def __init__(
        self,
        *,
        primary_label: str = "en",
        secondary_label: str = "zh",
        anomalies: Optional[AnomalyLog] = None,
    ):
        self.primary_label = primary_label
        self.secondary_label = secondary_label
        self.anomalies = anomalies
        self.dataset: Dict[str, KindComparison] = {}
        self.sheets: Dict[str, List[List[str]]] = {}

    @property
    def header(self) -> List[str]:
        return [
            "ID",
            f"{self.primary_label.upper()} Title",
            f"{self.secondary_label.upper()} Title",
        ]

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def compare(
        self,
        kind: str,
        primary: Iterable[Record],
        secondary: Iterable[Record],
        *,
        get_id: GetId,
        get_primary_title: GetTitle,
        get_secondary_title: Optional[GetTitle] = None,
    ) -> None:
        get_secondary_title = get_secondary_title or get_primary_title

        primary_keyed = self._keyed(kind, primary, get_id)
        secondary_keyed = self._keyed(kind, secondary, get_id)

        secondary_index: Dict[str, Record] = {}
        for key, record in secondary_keyed:
            secondary_index.setdefault(key, record)
        primary_ids = {key for key, _ in primary_keyed}

        result = KindComparison()
        self.dataset[kind] = result

        for key, record in primary_keyed:
            counterpart = secondary_index.get(key)
            if counterpart is None:
                result.need_secondary.append(
                    ComparisonEntry(key, get_primary_title(record), None)
                )
            else:
                result.matched.append(
                    ComparisonEntry(
                        key,
                        get_primary_title(record),
                        get_secondary_title(counterpart),
                    )
                )

        for key, record in secondary_keyed:
            if key not in primary_ids:
                result.need_primary.append(
                    ComparisonEntry(key, None, get_secondary_title(record))
                )

        self._append_rows(kind, result)

        log.info(
            "compare[%s]: matched=%d needPrimary=%d needSecondary=%d",
            kind,
            len(result.matched),
            len(result.need_primary),
            len(result.need_secondary),
        )

    def _keyed(self, kind: str, records: Iterable[Record], get_id: GetId):
        keyed = []
        for record in records or []:
            try:
                keyed.append((get_id(record), record))
            except StructuralError as exc:
                if self.anomalies is not None:
                    self.anomalies.record("comparator", STRUCTURAL, f"{kind}: {exc}")
                else:
                    log.warning("compare[%s]: skipped record: %s", kind, exc)
        return keyed

    def _append_rows(self, kind: str, result: KindComparison) -> None:
        rows: List[List[str]] = []
        rows.extend(e.to_row() for e in result.matched)
        rows.extend(e.to_row() for e in result.need_primary)
        rows.extend(e.to_row() for e in result.need_secondary)

        sheet = self.sheets.get(kind)
        if sheet is None:
            self.sheets[kind] = [self.header, *rows]
        else:
            sheet.extend(rows)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def kinds(self) -> Sequence[str]:
        return list(self.dataset.keys())

    def get(self, kind: str) -> Optional[KindComparison]:
        return self.dataset.get(kind)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "idMgr",
            "dataset": {kind: cmp.to_dict() for kind, cmp in self.dataset.items()},
        }

    def write_json(self, path: str | Path, indent: int = 2) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=indent, ensure_ascii=False)
        log.info("Comparison report written to %s", path)
        return path

    def write_workbook(self, path: str | Path) -> Path:
        """One worksheet per kind, rows in the order they were accumulated."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        wb = Workbook()
        default_sheet = wb.active
        for kind, rows in self.sheets.items():
            ws = wb.create_sheet(title=kind[:31])
            for row in rows:
                ws.append(row)
        if self.sheets:
            wb.remove(default_sheet)

        wb.save(path)
        log.info("Comparison workbook written to %s (%d sheets)", path, len(self.sheets))
        return path
