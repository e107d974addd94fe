from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from codex_merge.catalog import (
    BaseItemManager,
    BookManager,
    CatalogManager,
    FeatManager,
    FluffIndex,
    ItemManager,
    ItemPropertyManager,
    ItemTypeManager,
    MagicVariantManager,
    SpellManager,
    build_source_map,
    spell_files,
)
from codex_merge.core.context import RunContext
from codex_merge.core.exceptions import MergeError, MergeExecutionError
from codex_merge.exporter import export_collection, export_records, export_sources, write_json
from codex_merge.loader import CorpusLoader, CorpusPair

# Processing order; later kinds depend on earlier ones.
KINDS = (
    "book",
    "feat",
    "itemProperty",
    "itemType",
    "baseitem",
    "item",
    "magicvariant",
    "spell",
)

SPELL_DIR = "spells"


@dataclass
class Corpora:
    """Everything read from disk, fully loaded before resolution starts."""

    pairs: Dict[str, CorpusPair] = field(default_factory=dict)
    spells: List[CorpusPair] = field(default_factory=list)
    spell_fluff: List[CorpusPair] = field(default_factory=list)
    spell_classes: Optional[Dict[str, Any]] = None

    def get(self, relative_path: str) -> Optional[CorpusPair]:
        return self.pairs.get(relative_path)


class Pipeline:
    """
    Orchestrates the merge pipeline: load -> resolve -> write.
    No merge logic lives here.
    """

    def __init__(self, context: RunContext, kinds: Optional[Sequence[str]] = None):
        self.ctx = context
        self.log = context.logger
        selected = kinds or (context.config.pipeline or {}).get("kinds") or KINDS
        unknown = [k for k in selected if k not in KINDS]
        if unknown:
            raise ValueError(f"Unknown content kinds: {', '.join(unknown)}")
        self.kinds = [k for k in KINDS if k in selected]
        self.loader = CorpusLoader(context.primary_dir, context.secondary_dir)
        self.managers: Dict[str, CatalogManager] = {}
        self.source_map: Dict[str, Any] = {}
        self._fluff: Dict[str, FluffIndex] = {}

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    def run(self) -> Dict[str, Any]:
        self.log.info("Pipeline starting (kinds=%s)", ", ".join(self.kinds))

        try:
            corpora = self.load()
            self.resolve(corpora)
            self.write()

            self.log.info("Pipeline completed successfully")
            return self.ctx.stats

        except MergeError:
            self.log.exception("Pipeline aborted")
            raise
        except Exception as exc:
            self.log.exception("Pipeline execution failed")
            raise MergeExecutionError(str(exc)) from exc

    def compare_only(self) -> Dict[str, Dict[str, int]]:
        """Load the corpora and run nothing but the comparator."""
        try:
            corpora = self.load()
            for kind in self.kinds:
                manager = self._manager(kind, corpora)
                manager.primary, manager.secondary = self._records(kind, manager, corpora)
                manager.compare()
        except MergeError:
            self.log.exception("Comparison aborted")
            raise
        except Exception as exc:
            self.log.exception("Comparison failed")
            raise MergeExecutionError(str(exc)) from exc

        return {
            kind: self.ctx.comparator.get(kind).counts()
            for kind in self.ctx.comparator.kinds()
        }

    # ------------------------------------------------------------------
    # Load stage
    # ------------------------------------------------------------------
    def _needs(self, *kinds: str) -> bool:
        return any(k in self.kinds for k in kinds)

    def load(self) -> Corpora:
        corpora = Corpora()
        load = self.loader.load

        corpora.pairs["books.json"] = load("books.json", stage="books")
        corpora.pairs["adventures.json"] = self.loader.load_optional(
            "adventures.json", stage="adventures"
        )
        if self._needs("feat"):
            corpora.pairs["feats.json"] = load("feats.json", stage="feats")
        if self._needs("itemProperty", "itemType", "baseitem", "item", "magicvariant"):
            corpora.pairs["items-base.json"] = load("items-base.json", stage="items-base")
            corpora.pairs["fluff-items.json"] = self.loader.load_optional(
                "fluff-items.json", stage="items-fluff"
            )
        if self._needs("item"):
            corpora.pairs["items.json"] = load("items.json", stage="items")
        if self._needs("magicvariant"):
            corpora.pairs["magicvariants.json"] = load(
                "magicvariants.json", stage="magicvariants"
            )
        if self._needs("spell"):
            self._load_spells(corpora)

        self.log.info("All corpora loaded (%d files)", len(corpora.pairs) + len(corpora.spells))
        return corpora

    def _load_spells(self, corpora: Corpora) -> None:
        index = self.loader.load(f"{SPELL_DIR}/index.json", stage="spells", secondary_required=False)
        for source, name in spell_files(index.primary).items():
            corpora.spells.append(
                self.loader.load(
                    f"{SPELL_DIR}/{name}", stage=f"spells:{source}", secondary_required=False
                )
            )

        fluff_index = self.loader.load_optional(f"{SPELL_DIR}/fluff-index.json", stage="spells-fluff")
        names = {*spell_files(fluff_index.primary).values(), *spell_files(fluff_index.secondary).values()}
        for name in sorted(names):
            corpora.spell_fluff.append(
                self.loader.load_optional(f"{SPELL_DIR}/{name}", stage="spells-fluff")
            )

        classes = self.loader.load_optional(f"{SPELL_DIR}/sources.json", stage="spells-classes")
        corpora.spell_classes = classes.primary if isinstance(classes.primary, dict) else {}

    # ------------------------------------------------------------------
    # Resolve stage
    # ------------------------------------------------------------------
    def _item_fluff(self, corpora: Corpora) -> FluffIndex:
        if "item" not in self._fluff:
            fluff = FluffIndex(self.ctx.primary_lang, self.ctx.secondary_lang)
            pair = corpora.get("fluff-items.json")
            if pair is not None:
                fluff.add_payloads(pair.primary, pair.secondary, "itemFluff")
            self._fluff["item"] = fluff
        return self._fluff["item"]

    def _spell_fluff(self, corpora: Corpora) -> FluffIndex:
        fluff = FluffIndex(self.ctx.primary_lang, self.ctx.secondary_lang)
        for pair in corpora.spell_fluff:
            fluff.add_payloads(pair.primary, pair.secondary, "spellFluff")
        return fluff

    def _manager(self, kind: str, corpora: Corpora) -> CatalogManager:
        if kind in self.managers:
            return self.managers[kind]

        ctx = self.ctx
        if kind == "book":
            manager: CatalogManager = BookManager(ctx)
        elif kind == "feat":
            manager = FeatManager(ctx)
        elif kind == "itemProperty":
            manager = ItemPropertyManager(ctx)
        elif kind == "itemType":
            manager = ItemTypeManager(ctx)
        elif kind == "baseitem":
            manager = BaseItemManager(ctx, fluff=self._item_fluff(corpora))
        elif kind == "item":
            manager = ItemManager(ctx, base_items=self._base_items(corpora), fluff=self._item_fluff(corpora))
        elif kind == "magicvariant":
            manager = MagicVariantManager(ctx, base_items=self._base_items(corpora))
        else:
            manager = SpellManager(
                ctx, fluff=self._spell_fluff(corpora), class_lists=corpora.spell_classes
            )

        self.managers[kind] = manager
        return manager

    def _base_items(self, corpora: Corpora) -> BaseItemManager:
        """The base-item manager, with its lists set even when the kind is not merged."""
        base = self._manager("baseitem", corpora)
        if not base.primary and not base.secondary:
            base.primary, base.secondary = self._records("baseitem", base, corpora)
        return base

    def _records(self, kind: str, manager: CatalogManager, corpora: Corpora):
        if kind == "spell":
            primary: List[Dict[str, Any]] = []
            secondary: List[Dict[str, Any]] = []
            for pair in corpora.spells:
                primary.extend(manager.extract(pair.primary))
                secondary.extend(manager.extract(pair.secondary))
            return primary, secondary

        pair = corpora.get(manager.corpus_file)
        if pair is None:
            return [], []
        return manager.extract(pair.primary), manager.extract(pair.secondary)

    def resolve(self, corpora: Corpora) -> None:
        for kind in self.kinds:
            self.log.info("[%s] resolving", kind)
            manager = self._manager(kind, corpora)
            primary, secondary = self._records(kind, manager, corpora)
            records = manager.load(primary, secondary)
            self.ctx.stats[kind] = len(records)

        books = corpora.get("books.json")
        adventures = corpora.get("adventures.json")
        self.source_map = build_source_map(
            [_list(books.primary, "book"), _list(adventures.primary, "adventure")],
            [_list(books.secondary, "book"), _list(adventures.secondary, "adventure")],
        )
        self.ctx.stats["sources"] = len(self.source_map)
        self.ctx.stats["anomalies"] = len(self.ctx.anomalies)

    # ------------------------------------------------------------------
    # Write stage
    # ------------------------------------------------------------------
    def write(self) -> Path:
        out = Path(self.ctx.output_dir)
        out.mkdir(parents=True, exist_ok=True)

        for kind in self.kinds:
            manager = self.managers[kind]
            export_collection(manager.to_collection(), out)
            if manager.per_record_dir:
                export_records(
                    manager.records,
                    out / manager.per_record_dir,
                    primary_lang=self.ctx.primary_lang,
                    secondary_lang=self.ctx.secondary_lang,
                )

        export_sources(self.source_map, out)
        write_json(self.ctx.anomalies.to_dict(), out / "logs.json")
        self.ctx.comparator.write_json(out / "idMgr.json")
        if (self.ctx.config.pipeline or {}).get("write_workbook", True):
            self.ctx.comparator.write_workbook(out / "idMgr.xlsx")

        self.log.info("Output written to %s", out)
        return out


def _list(payload: Any, name: str) -> List[Dict[str, Any]]:
    if not isinstance(payload, dict):
        return []
    return list(payload.get(name) or [])
