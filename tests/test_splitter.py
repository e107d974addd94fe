# tests/test_splitter.py

from __future__ import annotations

from codex_merge.i18n import (
    KeyRules,
    build_grouped_block,
    classify_keys,
    merge_localized,
    split_record,
)


def _split(primary, secondary, **kwargs):
    key_sets = classify_keys([(primary, secondary)], KeyRules())
    return split_record(primary, secondary, key_sets, **kwargs)


def test_common_and_localized_fields_are_disjoint():
    primary = {"name": "Dagger", "source": "PHB", "weight": 1}
    secondary = {"name": "匕首", "source": "PHB", "weight": 1}
    out = _split(primary, secondary)

    assert out.common == {"source": "PHB", "weight": 1}
    assert out.primary == {"name": "Dagger"}
    assert out.secondary == {"name": "匕首"}
    assert not set(out.common) & (set(out.primary) | set(out.secondary))


def test_missing_secondary_gets_placeholder():
    out = _split({"name": "Dagger", "weight": 1}, None, empty_value="")
    assert out.primary == {"name": "Dagger", "weight": 1}
    assert out.secondary == {"name": "", "weight": ""}


def test_custom_placeholder():
    out = _split({"entries": ["x"]}, {}, empty_value=None)
    assert out.secondary == {"entries": None}


def test_secondary_only_localized_field_is_kept():
    out = _split({"name": "A"}, {"name": "甲", "note": "备注"})
    assert out.secondary == {"name": "甲", "note": "备注"}
    assert "note" not in out.primary


def test_skip_keys_are_left_out():
    out = _split({"name": "A", "dmg1": "1d4"}, {"name": "A", "dmg1": "1d4"}, skip_keys=["dmg1"])
    assert "dmg1" not in out.common


def test_grouped_block():
    primary = {"dmg1": "1d8", "property": ["V"], "mastery": ["Sap"]}
    secondary = {"dmg1": "1d8", "property": ["V"], "mastery": ["削弱"]}
    block = build_grouped_block(
        primary, secondary, ["dmg1", "property", "mastery", "range"], ["mastery"]
    )
    assert block.common == {"dmg1": "1d8", "property": ["V"]}
    assert block.primary == {"mastery": ["Sap"]}
    assert block.secondary == {"mastery": ["削弱"]}


def test_empty_grouped_block():
    block = build_grouped_block({"name": "A"}, None, ["ac"], [])
    assert block.is_empty()


def test_merge_localized_is_recursive():
    primary = {"entries": ["a"], "images": [{"href": {"path": "a.webp"}}], "meta": {"x": 1, "y": 2}}
    secondary = {"entries": ["甲"], "meta": {"y": 3}}
    merged = merge_localized(primary, secondary)

    assert merged["entries"] == ["甲"]
    assert merged["images"] == primary["images"]
    assert merged["meta"] == {"x": 1, "y": 3}


def test_merge_localized_keeps_explicit_null():
    assert merge_localized({"a": 1}, {"a": None}) == {"a": None}
    assert merge_localized({"a": 1}, None) == {"a": 1}
