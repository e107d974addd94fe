# tests/test_merged_record.py

from __future__ import annotations

import pytest

from codex_merge.core.anomalies import LOCALIZATION_GAP, AnomalyLog
from codex_merge.entities import MergedRecord, display_name_pair
from codex_merge.i18n import SplitRecord
from codex_merge.identity import IdentityGuard


def test_display_name_pair():
    assert display_name_pair("Dagger", "匕首") == "匕首"
    assert display_name_pair("Dagger", " Dagger ") is None
    assert display_name_pair("Dagger", "") is None
    assert display_name_pair("Dagger", None) is None


def test_to_dict_layout():
    split = SplitRecord(
        common={"source": "PHB", "id": "shadowed", "weight": 1},
        primary={"name": "Dagger"},
        secondary={"name": "匕首"},
    )
    record = MergedRecord.from_split(
        "item",
        "Dagger|PHB",
        split,
        primary_name="Dagger",
        secondary_name="匕首",
        main_source={"source": "PHB", "page": 149},
        all_sources=[{"source": "PHB", "page": 149}],
    )
    record.set_extra("isBaseItem", True)
    record.set_extra("charge", None)

    out = record.to_dict("en", "zh")
    assert list(out)[:6] == ["dataType", "uid", "id", "displayName", "mainSource", "allSources"]
    assert out["uid"] == "item_Dagger|PHB"
    assert out["id"] == "Dagger|PHB"
    assert "relatedVersions" not in out
    assert out["weight"] == 1
    assert out["isBaseItem"] is True
    assert "charge" not in out
    assert out["en"] == {"name": "Dagger"}
    assert out["zh"] == {"name": "匕首"}


def test_language_codes_come_from_caller():
    record = MergedRecord(data_type="feat", id="Alert|PHB", primary_name="Alert",
                          related_versions=["Alert|XPHB"])
    out = record.to_dict("en", "fr")
    assert out["displayName"] == {"en": "Alert", "fr": None}
    assert out["fr"] is None
    assert out["relatedVersions"] == ["Alert|XPHB"]


def test_guard_first_claim_wins():
    guard = IdentityGuard()
    assert guard.claim("item", "Dagger|PHB", "baseitem")
    assert not guard.claim("item", "Dagger|PHB", "item")
    assert guard.claim("feat", "Dagger|PHB", "feat")
    assert guard.owner_of("item", "Dagger|PHB") == "baseitem"
    assert guard.size() == 2
    assert guard.size("item") == 1


def test_anomaly_log():
    log = AnomalyLog()
    log.record("FeatManager", LOCALIZATION_GAP, "no secondary", key="Alert|PHB")

    assert len(log) == 1
    assert log.counts() == {LOCALIZATION_GAP: 1}
    assert log.to_dict()["data"][0]["key"] == "Alert|PHB"
    with pytest.raises(ValueError):
        log.record("x", "bogus", "message")
