from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from codex_merge.catalog.base import CatalogManager, Record
from codex_merge.identity import id_key

TEMPLATE_NAME_PREFIX = "{!@ "


def parse_book_headers(contents: Any) -> List[Dict[str, Any]]:
    """Flatten a book's ``contents`` into ``[{name, subHeaders: [{name}]}]``."""
    headers: List[Dict[str, Any]] = []
    for content in contents or []:
        if not isinstance(content, Mapping):
            continue
        sub_headers = []
        for sub in content.get("headers") or []:
            if isinstance(sub, str):
                sub_headers.append({"name": sub})
            elif isinstance(sub, Mapping):
                sub_headers.append({"name": sub.get("header")})
        headers.append({"name": content.get("name"), "subHeaders": sub_headers})
    return headers


class BookManager(CatalogManager):
    kind = "book"
    data_type = "book"
    corpus_file = "books.json"
    list_names = ("book",)

    def get_id(self, record: Mapping[str, Any]) -> str:
        return id_key(record)

    def payload(self, record: Mapping[str, Any]) -> Record:
        out = {k: v for k, v in record.items() if k != "contents"}
        out["headers"] = parse_book_headers(record.get("contents"))
        return out

    def main_source(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        return {"source": record.get("source") or record.get("id"), "page": 0}


# ----------------------------------------------------------------------
# Source map
# ----------------------------------------------------------------------

def _is_template_name(name: Any) -> bool:
    return isinstance(name, str) and name.startswith(TEMPLATE_NAME_PREFIX)


def build_source_map(
    primary_lists: List[Optional[List[Mapping[str, Any]]]],
    secondary_lists: List[Optional[List[Mapping[str, Any]]]],
) -> Dict[str, Dict[str, Any]]:
    """
    Map every book/adventure id to its primary name, publication date and
    localized name.

    Primary entries need id, name and published date. Secondary entries only
    add a localized name, unless no primary entry exists for the id; then
    they create one. Untranslated template names (``{!@ ...``) are ignored.
    """
    source_map: Dict[str, Dict[str, Any]] = {}

    for primary, secondary in zip(primary_lists, secondary_lists):
        for entry in primary or []:
            if entry.get("id") and entry.get("name") and entry.get("published"):
                source_map[entry["id"]] = {
                    "id": entry["id"],
                    "source_name": entry["name"],
                    "source_published": entry["published"],
                }

        for entry in secondary or []:
            sid, name = entry.get("id"), entry.get("name")
            if not sid or not name:
                continue
            template = _is_template_name(name)
            localized = name if isinstance(name, str) and not template else ""

            if sid in source_map:
                if localized:
                    source_map[sid]["source_localized_name"] = localized
            else:
                source_map[sid] = {
                    "id": sid,
                    "source_name": sid if template else name,
                    "source_published": entry.get("published") or "",
                    "source_localized_name": localized,
                }

    return source_map
