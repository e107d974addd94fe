# tests/test_canonical_key.py

from __future__ import annotations

import pytest

from codex_merge.core.exceptions import StructuralError
from codex_merge.identity import (
    abbreviation_key,
    canonical_key,
    escape_id,
    id_key,
    key_name,
    normalize_reprinted_as,
    reprint_sources,
    trailing_source,
)


def test_key_is_name_and_source():
    assert canonical_key({"name": "Dagger", "source": "PHB"}) == "Dagger|PHB"


def test_key_trims_name_but_keeps_case():
    assert canonical_key({"name": "  Flame Tongue ", "source": "DMG"}) == "Flame Tongue|DMG"


def test_alternate_name_wins_over_localized_name():
    record = {"name": "匕首", "ENG_name": "Dagger", "source": "PHB"}
    assert key_name(record) == "Dagger"
    assert canonical_key(record) == "Dagger|PHB"


def test_alternate_name_field_fallback():
    record = {"name": "Longue épée", "alternateName": "Longsword", "source": "PHB"}
    assert canonical_key(record) == "Longsword|PHB"


def test_blank_alternate_name_is_ignored():
    record = {"name": "Dagger", "ENG_name": "  ", "source": "PHB"}
    assert canonical_key(record) == "Dagger|PHB"


def test_source_override():
    assert canonical_key({"name": "+1 Weapon"}, source="DMG") == "+1 Weapon|DMG"


def test_missing_source_is_structural_error():
    with pytest.raises(StructuralError):
        canonical_key({"name": "Dagger"})


def test_missing_name_is_structural_error():
    with pytest.raises(StructuralError):
        canonical_key({"source": "PHB"})


def test_abbreviation_key():
    assert abbreviation_key({"abbreviation": "F", "source": "PHB"}) == "F|PHB"
    with pytest.raises(StructuralError):
        abbreviation_key({"source": "PHB"})


def test_id_key():
    assert id_key({"id": "PHB", "name": "Player's Handbook"}) == "PHB"
    with pytest.raises(StructuralError):
        id_key({"name": "No id"})


def test_reprinted_as_accepts_strings_and_uid_objects():
    entries = ["Dagger|XPHB", {"uid": "Dagger|XDMG", "tag": "item"}, {"tag": "x"}, ""]
    assert normalize_reprinted_as(entries) == ["Dagger|XPHB", "Dagger|XDMG"]
    assert normalize_reprinted_as(None) == []


def test_reprint_sources_have_page_zero():
    assert reprint_sources(["Dagger|XPHB"]) == [{"source": "XPHB", "page": 0}]


def test_trailing_source_and_escape():
    assert trailing_source("Bag of Holding|DMG") == "DMG"
    assert escape_id("Arrows (20)|PHB") == "Arrows (20)@PHB"
    assert escape_id("Fire/Ice|X") == "Fire__Ice@X"
