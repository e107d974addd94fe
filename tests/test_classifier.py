# tests/test_classifier.py

from __future__ import annotations

from codex_merge.i18n import KeyRules, classify_keys, values_equal
from codex_merge.i18n.classifier import MISSING


def test_identical_field_is_common_and_differing_field_is_localized():
    pairs = [
        ({"weight": 1, "entries": ["A sharp blade."]}, {"weight": 1, "entries": ["一把利刃。"]}),
        ({"weight": 3, "entries": ["Heavy."]}, {"weight": 3, "entries": ["Heavy."]}),
    ]
    key_sets = classify_keys(pairs, KeyRules())

    assert "weight" in key_sets.common_keys
    assert "entries" in key_sets.localized_keys
    assert key_sets.all_keys == {"weight", "entries"}


def test_one_sided_field_is_localized():
    key_sets = classify_keys([({"weight": 1, "note": "x"}, {"weight": 1})], KeyRules())
    assert key_sets.is_localized("note")
    assert not key_sets.is_localized("weight")


def test_missing_secondary_makes_every_field_localized():
    key_sets = classify_keys([({"weight": 1}, None)], KeyRules())
    assert key_sets.localized_keys == {"weight"}


def test_force_lists_override_heuristic():
    rules = KeyRules(force_localized=frozenset({"name"}), force_common=frozenset({"source"}))
    pairs = [({"name": "Dagger", "source": "PHB"}, {"name": "Dagger", "source": "PHB-zh"})]
    key_sets = classify_keys(pairs, rules)

    assert key_sets.is_localized("name")
    assert "source" in key_sets.common_keys


def test_force_common_beats_force_localized():
    rules = KeyRules(force_localized=frozenset({"page"}), force_common=frozenset({"page"}))
    key_sets = classify_keys([({"page": 1}, {"page": 1})], rules)
    assert "page" in key_sets.common_keys


def test_adding_a_differing_pair_never_unlocalizes():
    agreeing = ({"entries": ["a"]}, {"entries": ["a"]})
    differing = ({"entries": ["a"]}, {"entries": ["b"]})

    before = classify_keys([differing], KeyRules())
    after = classify_keys([differing, agreeing], KeyRules())
    assert before.localized_keys <= after.localized_keys


def test_apply_overrides():
    key_sets = classify_keys([({"a": 1, "b": 1}, {"a": 1, "b": 2})], KeyRules())
    adjusted = key_sets.apply_overrides(force_localized=["a"], force_common=["b"])
    assert adjusted.localized_keys == {"a"}
    assert adjusted.common_keys == {"b"}


def test_values_equal_is_deep_and_strict():
    assert values_equal({"a": [1, {"b": 2}]}, {"a": [1, {"b": 2}]})
    assert not values_equal({"a": [1, 2]}, {"a": [2, 1]})
    assert not values_equal(True, 1)
    assert not values_equal(0, False)
    assert values_equal(None, None)
    assert not values_equal(None, MISSING)
    assert values_equal(MISSING, MISSING)


def test_rules_from_config_section():
    rules = KeyRules.from_config(
        {
            "force_localized_keys": ["name"],
            "force_common_keys": ["source"],
            "weapon_keys": ["dmg1"],
            "armor_keys": ["ac"],
        }
    )
    assert rules.force_localized == {"name"}
    assert rules.weapon_keys == ("dmg1",)
    assert KeyRules.from_config(None) == KeyRules()
