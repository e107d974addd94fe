from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from codex_merge.catalog.base import CatalogManager, Record
from codex_merge.catalog.items import BaseItemManager
from codex_merge.core.context import RunContext
from codex_merge.entities import MergedRecord
from codex_merge.variants import ExpansionResult, VariantExpansionEngine, template_key


class MagicVariantManager(CatalogManager):
    """
    Templates are keyed on their effective source and expanded against the
    base-item catalog; both the templates and their derivations land in the
    ``item`` namespace.
    """

    kind = "magicvariant"
    data_type = "item"
    corpus_file = "magicvariants.json"
    list_names = ("magicvariant",)
    namespace = "item"
    per_record_dir = "item"

    def __init__(self, ctx: RunContext, base_items: Optional[BaseItemManager] = None):
        super().__init__(ctx)
        self.base_items = base_items
        self.engine = VariantExpansionEngine(
            guard=ctx.guard,
            anomalies=ctx.anomalies,
            settings=ctx.variant_settings,
            rules=ctx.key_rules,
            empty_value=ctx.empty_value,
            namespace=self.namespace,
            data_type=self.data_type,
        )
        self.result: Optional[ExpansionResult] = None

    def get_id(self, record: Mapping[str, Any]) -> str:
        return template_key(record)

    def load(self, primary: Sequence[Record], secondary: Sequence[Record]) -> List[MergedRecord]:
        self.primary = list(primary or [])
        self.secondary = list(secondary or [])
        self.compare()

        bases = self.base_items.primary if self.base_items else []
        secondary_bases = self.base_items.secondary if self.base_items else []
        self.result = self.engine.expand(self.primary, self.secondary, bases, secondary_bases)
        self.records = self.result.all()
        return self.records
