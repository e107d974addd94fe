"""
Record-level anomaly log.

Anomalies never abort a run: a missing counterpart, an unresolved reference or
a rejected duplicate is recorded here, logged at WARNING, and processing
continues with the next record.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from codex_merge.logger import get_logger

log = get_logger("anomalies")

STRUCTURAL = "structural"
CROSS_REFERENCE = "cross_reference"
LOCALIZATION_GAP = "localization_gap"
IDENTITY_COLLISION = "identity_collision"
UNMATCHED_VARIANT = "unmatched_variant"

CATEGORIES = (
    STRUCTURAL,
    CROSS_REFERENCE,
    LOCALIZATION_GAP,
    IDENTITY_COLLISION,
    UNMATCHED_VARIANT,
)


@dataclass(slots=True)
class Anomaly:
    source: str
    category: str
    message: str
    key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "category": self.category,
            "message": self.message,
            "key": self.key,
        }


@dataclass
class AnomalyLog:
    entries: List[Anomaly] = field(default_factory=list)

    def record(
        self,
        source: str,
        category: str,
        message: str,
        *,
        key: Optional[str] = None,
    ) -> Anomaly:
        if category not in CATEGORIES:
            raise ValueError(f"Unknown anomaly category: {category!r}")
        entry = Anomaly(source=source, category=category, message=message, key=key)
        self.entries.append(entry)
        log.warning("[%s] %s: %s", source, category, message)
        return entry

    def by_category(self, category: str) -> List[Anomaly]:
        return [e for e in self.entries if e.category == category]

    def counts(self) -> Dict[str, int]:
        return dict(Counter(e.category for e in self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "logs",
            "data": [e.to_dict() for e in self.entries],
        }
