# tests/test_catalog.py

from __future__ import annotations

from codex_merge.catalog import (
    BaseItemManager,
    BookManager,
    FeatManager,
    FluffIndex,
    ItemManager,
    ItemPropertyManager,
    ItemTypeManager,
    SpellManager,
    build_source_map,
    classify_item,
    parse_book_headers,
    resolve_base_item,
)
from codex_merge.catalog.fluff import PRIMARY
from codex_merge.catalog.items import bonus_block, charge_block
from codex_merge.core.anomalies import CROSS_REFERENCE, IDENTITY_COLLISION, LOCALIZATION_GAP


# ---------------------------------------------------------------------------
# Feats
# ---------------------------------------------------------------------------

ALERT_PHB = {
    "name": "Alert",
    "source": "PHB",
    "page": 165,
    "entries": ["Always on the lookout for danger."],
    "reprintedAs": ["Alert|XPHB"],
}
ALERT_XPHB = {"name": "Alert", "source": "XPHB", "page": 200, "entries": ["Initiative."]}
ALERT_ZH = {
    "name": "警觉",
    "ENG_name": "Alert",
    "source": "PHB",
    "page": 165,
    "entries": ["时刻警惕危险。"],
    "reprintedAs": ["Alert|XPHB"],
}


def test_feat_records_are_split_and_linked(ctx):
    manager = FeatManager(ctx)
    records = manager.load([ALERT_PHB, ALERT_XPHB], [ALERT_ZH])

    assert [r.id for r in records] == ["Alert|PHB", "Alert|XPHB"]
    alert = records[0].to_dict()
    assert alert["dataType"] == "feat"
    assert alert["uid"] == "feat_Alert|PHB"
    assert alert["displayName"] == {"en": "Alert", "zh": "警觉"}
    assert alert["mainSource"] == {"source": "PHB", "page": 165}
    assert alert["relatedVersions"] == ["Alert|XPHB"]
    assert alert["source"] == "PHB"
    assert alert["ENG_name"] == "Alert"
    assert alert["en"]["entries"] == ["Always on the lookout for danger."]
    assert alert["zh"]["entries"] == ["时刻警惕危险。"]
    assert alert["reprintedAs"] == ["Alert|XPHB"]


def test_feat_without_translation_gets_placeholders(ctx):
    manager = FeatManager(ctx)
    records = manager.load([ALERT_PHB, ALERT_XPHB], [ALERT_ZH])

    newer = records[1].to_dict()
    assert newer["displayName"]["zh"] is None
    assert newer["zh"]["name"] == ""
    assert newer["zh"]["entries"] == ""
    gaps = ctx.anomalies.by_category(LOCALIZATION_GAP)
    assert [a.key for a in gaps] == ["Alert|XPHB"]


def test_duplicate_key_is_refused(ctx):
    manager = FeatManager(ctx)
    records = manager.load([ALERT_PHB, dict(ALERT_PHB)], [ALERT_ZH])

    assert len(records) == 1
    assert len(ctx.anomalies.by_category(IDENTITY_COLLISION)) == 1


def test_feat_collection(ctx):
    manager = FeatManager(ctx)
    manager.load([ALERT_PHB], [ALERT_ZH])

    collection = manager.to_collection()
    assert collection["type"] == "featCollection"
    assert collection["data"][0]["id"] == "Alert|PHB"
    assert ctx.comparator.get("feat").counts()["matched"] == 1


# ---------------------------------------------------------------------------
# Books and sources
# ---------------------------------------------------------------------------

def test_book_headers_replace_contents(ctx):
    primary = {
        "id": "PHB",
        "name": "Player's Handbook",
        "source": "PHB",
        "published": "2014-08-19",
        "contents": [{"name": "Races", "headers": ["Dwarf", {"header": "Elf", "depth": 1}]}],
    }
    secondary = dict(primary, name="玩家手册", contents=[{"name": "种族", "headers": ["矮人", "精灵"]}])

    records = BookManager(ctx).load([primary], [secondary])
    book = records[0].to_dict()

    assert book["id"] == "PHB"
    assert book["mainSource"] == {"source": "PHB", "page": 0}
    assert "contents" not in book["en"]
    assert book["en"]["headers"] == [
        {"name": "Races", "subHeaders": [{"name": "Dwarf"}, {"name": "Elf"}]}
    ]
    assert book["zh"]["headers"][0]["name"] == "种族"


def test_parse_book_headers_skips_non_objects():
    assert parse_book_headers(["stray", {"name": "Intro"}]) == [{"name": "Intro", "subHeaders": []}]


def test_source_map():
    source_map = build_source_map(
        [
            [{"id": "PHB", "name": "Player's Handbook", "published": "2014-08-19"}],
            [{"id": "LMoP", "name": "Lost Mine of Phandelver", "published": "2014-07-15"}],
        ],
        [
            [
                {"id": "PHB", "name": "玩家手册"},
                {"id": "XGE", "name": "{!@ Xanathar}", "published": "2017-11-21"},
            ],
            [{"id": "LMoP", "name": "{!@ untranslated}"}],
        ],
    )

    assert source_map["PHB"] == {
        "id": "PHB",
        "source_name": "Player's Handbook",
        "source_published": "2014-08-19",
        "source_localized_name": "玩家手册",
    }
    assert "source_localized_name" not in source_map["LMoP"]
    assert source_map["XGE"]["source_name"] == "XGE"
    assert source_map["XGE"]["source_localized_name"] == ""


# ---------------------------------------------------------------------------
# Item properties and types
# ---------------------------------------------------------------------------

def test_item_property_name_and_abbreviation(ctx):
    primary = {
        "abbreviation": "V",
        "source": "PHB",
        "page": 147,
        "entries": [{"type": "entries", "name": "Versatile", "entries": ["Two hands."]}],
    }
    secondary = dict(
        primary, entries=[{"type": "entries", "name": "多用", "entries": ["双手。"]}]
    )
    records = ItemPropertyManager(ctx).load([primary], [secondary])

    prop = records[0].to_dict()
    assert prop["id"] == "V|PHB"
    assert prop["displayName"] == {"en": "Versatile", "zh": "多用"}
    assert prop["abbreviation"] == "V"
    assert prop["en"]["name"] == "Versatile"


def test_item_type(ctx):
    records = ItemTypeManager(ctx).load(
        [{"abbreviation": "HA", "source": "PHB", "name": "Heavy Armor"}],
        [{"abbreviation": "HA", "source": "PHB", "name": "重甲"}],
    )
    assert records[0].id == "HA|PHB"
    assert records[0].secondary_name == "重甲"


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

LONGSWORD = {
    "name": "Longsword",
    "source": "PHB",
    "page": 149,
    "type": "M",
    "weapon": True,
    "weaponCategory": "martial",
    "sword": True,
    "dmg1": "1d8",
    "dmgType": "S",
    "property": ["V"],
    "value": 1500,
}
LONGSWORD_ZH = dict(LONGSWORD, name="长剑", ENG_name="Longsword")
PLATE = {"name": "Plate Armor", "source": "PHB", "page": 145, "type": "HA", "armor": True,
         "ac": 18, "strength": 15, "stealth": True}


def test_classify_item():
    assert classify_item(LONGSWORD) == {"type": "weapon", "subTypes": ["sword"]}
    assert classify_item({"ammoType": "arrow|phb", "arrow": True}) == {"type": "ammo", "subTypes": ["arrow"]}
    assert classify_item(PLATE) == {"type": "armor"}
    assert classify_item({"poison": True, "poisonTypes": ["injury"]}) == {
        "type": "poison",
        "subTypes": ["injury"],
    }
    assert classify_item({"name": "Rope"}) == {"type": "other"}


def test_charge_and_bonus_blocks():
    wand = {"charges": 7, "recharge": "dawn", "rechargeAmount": "{@dice 1d6 + 1}", "bonusSpellAttack": "+2"}
    assert charge_block(wand) == {"max": 7, "rechargeAt": "dawn", "rechargeAmount": "{@dice 1d6 + 1}"}
    assert bonus_block(wand) == {"spellAttack": 2}
    assert charge_block({}) is None
    assert bonus_block({"bonusAc": "0"}) is None


def test_base_items_carry_grouped_blocks(ctx):
    fluff = FluffIndex("en", "zh")
    fluff.add(PRIMARY, [{"name": "Longsword", "source": "PHB", "entries": ["Iconic."]}])
    manager = BaseItemManager(ctx, fluff=fluff)
    records = manager.load([LONGSWORD, PLATE], [LONGSWORD_ZH])

    sword = records[0].to_dict()
    assert sword["isBaseItem"] is True
    assert sword["itemType"] == {"type": "weapon", "subTypes": ["sword"]}
    assert sword["weapon"]["common"]["dmg1"] == "1d8"
    assert "dmg1" not in sword["en"]
    assert "dmg1" not in sword
    assert "armor" not in sword
    assert sword["full"] == {"en": {"entries": ["Iconic."]}, "zh": None}

    plate = records[1].to_dict()
    assert plate["armor"]["en"]["ac"] == 18
    assert plate["armor"]["zh"]["ac"] == ""


def test_resolve_base_item_is_case_insensitive():
    bases = [LONGSWORD, dict(LONGSWORD, source="XPHB")]
    assert resolve_base_item("longsword|xphb", bases)["source"] == "XPHB"
    assert resolve_base_item("LONGSWORD", bases)["source"] == "PHB"
    assert resolve_base_item("club|phb", bases) is None


def test_item_base_reference_and_group_items(ctx):
    base = BaseItemManager(ctx)
    base.primary, base.secondary = [LONGSWORD], [LONGSWORD_ZH]
    manager = ItemManager(ctx, base_items=base)

    vorpal = {"name": "Vorpal Sword", "source": "DMG", "page": 209, "baseItem": "longsword|phb",
              "rarity": "legendary"}
    broken = {"name": "Odd Blade", "source": "DMG", "page": 1, "baseItem": "nothing|phb"}
    group = {"name": "Arcane Focus", "source": "PHB", "page": 151,
             "items": ["Crystal|PHB", "Orb|PHB"]}
    group_zh = dict(group, name="奥术法器", ENG_name="Arcane Focus", items=["水晶|PHB", "宝珠|PHB"])

    records = {r.id: r for r in manager.load([vorpal, broken, group], [group_zh])}

    assert records["Vorpal Sword|DMG"].get("baseItem") == "Longsword|PHB"
    assert records["Vorpal Sword|DMG"].get("isBaseItem") is False
    assert records["Odd Blade|DMG"].get("baseItem") == "nothing|phb"
    assert [a.key for a in ctx.anomalies.by_category(CROSS_REFERENCE)] == ["Odd Blade|DMG"]

    focus = records["Arcane Focus|PHB"].to_dict()
    assert focus["items"] == ["水晶|PHB", "宝珠|PHB"]
    assert "items" not in focus["en"]


def test_items_share_namespace_with_base_items(ctx):
    BaseItemManager(ctx).load([LONGSWORD], [])
    records = ItemManager(ctx).load([dict(LONGSWORD)], [])

    assert records == []
    assert ctx.guard.owner_of("item", "Longsword|PHB") == "baseitem"


# ---------------------------------------------------------------------------
# Spells
# ---------------------------------------------------------------------------

FIREBALL = {
    "name": "Fireball",
    "source": "PHB",
    "page": 241,
    "level": 3,
    "school": "V",
    "damageInflict": ["fire"],
    "savingThrow": ["dexterity"],
    "entries": ["A bright streak flashes."],
}


def test_spell_extras(ctx):
    classes = {"PHB": {"Fireball": {"class": [{"name": "Wizard", "source": "PHB"}]}}}
    manager = SpellManager(ctx, class_lists=classes)
    alarm = {"name": "Alarm", "source": "PHB", "page": 211, "level": 1, "school": "A",
             "meta": {"ritual": True}, "entries": ["Ward."]}
    records = manager.load([FIREBALL, alarm], [dict(FIREBALL, name="火球术", ENG_name="Fireball")])

    fireball = records[0].to_dict()
    assert fireball["dataType"] == "spell"
    assert fireball["level"] == 3
    assert fireball["ritual"] is False
    assert fireball["damageInflict"] == ["fire"]
    assert fireball["conditionInflict"] == []
    assert fireball["classes"] == [{"name": "Wizard", "source": "PHB"}]
    assert fireball["displayName"]["zh"] == "火球术"

    assert records[1].get("ritual") is True
    assert records[1].get("classes") is None
