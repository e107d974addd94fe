from __future__ import annotations

from codex_merge.catalog.base import CatalogManager


class FeatManager(CatalogManager):
    kind = "feat"
    data_type = "feat"
    corpus_file = "feats.json"
    list_names = ("feat",)
