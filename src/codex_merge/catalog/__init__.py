"""
Per-kind catalog managers.

Each manager takes the run context, consumes one kind's pair of record lists
and exposes the merged records plus a collection document for the writer.
"""

from __future__ import annotations

from .base import CatalogManager
from .books import BookManager, build_source_map, parse_book_headers
from .feats import FeatManager
from .fluff import FluffIndex
from .item_meta import ItemPropertyManager, ItemTypeManager, property_name
from .items import BaseItemManager, ItemManager, classify_item, resolve_base_item
from .magic_variants import MagicVariantManager
from .spells import SpellManager, spell_files

__all__ = [
    "BaseItemManager",
    "BookManager",
    "CatalogManager",
    "FeatManager",
    "FluffIndex",
    "ItemManager",
    "ItemPropertyManager",
    "ItemTypeManager",
    "MagicVariantManager",
    "SpellManager",
    "build_source_map",
    "classify_item",
    "parse_book_headers",
    "property_name",
    "resolve_base_item",
    "spell_files",
]
