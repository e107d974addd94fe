"""
Base items and items.

Both kinds share the ``item`` identity namespace with magic variants and
their derivations. Weapon and armor attributes are carved out of the main
split and emitted as grouped ``weapon`` / ``armor`` blocks.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from codex_merge.catalog.base import CatalogManager, Record
from codex_merge.catalog.fluff import FluffIndex
from codex_merge.core.anomalies import CROSS_REFERENCE
from codex_merge.core.context import RunContext
from codex_merge.core.exceptions import StructuralError
from codex_merge.entities import MergedRecord
from codex_merge.i18n import GroupedBlock, build_grouped_block

WEAPON_SUBTYPES = (
    "sword",
    "crossbow",
    "axe",
    "staff",
    "club",
    "spear",
    "dagger",
    "hammer",
    "bow",
    "mace",
    "firearm",
    "polearm",
    "lance",
    "rapier",
    "tattoo",
)
AMMO_SUBTYPES = ("arrow", "bolt", "cellEnergy", "bulletFirearm", "bulletSling")

BONUS_FIELDS = {
    "weapon": "bonusWeapon",
    "weaponAttack": "bonusWeaponAttack",
    "weaponDamage": "bonusWeaponDamage",
    "spellAttack": "bonusSpellAttack",
    "spellSaveDc": "bonusSpellSaveDc",
    "ac": "bonusAc",
    "savingThrow": "bonusSavingThrow",
    "abilityCheck": "bonusAbilityCheck",
    "proficiencyBonus": "bonusProficiencyBonus",
}


# ----------------------------------------------------------------------
# Item helpers
# ----------------------------------------------------------------------

def classify_item(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Coarse item category plus sub-categories, for filtering downstream."""
    sub_types: List[str] = []
    if record.get("weapon"):
        category = "weapon"
        sub_types = [k for k in WEAPON_SUBTYPES if record.get(k)]
    elif record.get("ammoType"):
        category = "ammo"
        sub_types = [k for k in AMMO_SUBTYPES if record.get(k)]
    elif record.get("armor"):
        category = "armor"
    elif record.get("poison"):
        category = "poison"
        sub_types = list(record.get("poisonTypes") or [])
    elif record.get("net"):
        category = "net"
    else:
        category = "other"

    out: Dict[str, Any] = {"type": category}
    if sub_types:
        out["subTypes"] = sub_types
    return out


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not number:
        return None
    return int(number) if number.is_integer() else number


def bonus_block(record: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    bonus = {}
    for out_key, field_name in BONUS_FIELDS.items():
        value = _number(record.get(field_name))
        if value is not None:
            bonus[out_key] = value
    return bonus or None


def charge_block(record: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    if not record.get("charges"):
        return None
    return {
        "max": record.get("charges"),
        "rechargeAt": record.get("recharge"),
        "rechargeAmount": record.get("rechargeAmount"),
    }


def grouped_to_dict(block: GroupedBlock, primary_lang: str, secondary_lang: str) -> Optional[Dict[str, Any]]:
    if block.is_empty():
        return None
    out: Dict[str, Any] = {}
    if block.common is not None:
        out["common"] = block.common
    if block.primary is not None:
        out[primary_lang] = block.primary
    if block.secondary is not None:
        out[secondary_lang] = block.secondary
    return out


def resolve_base_item(reference: Any, bases: Iterable[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """
    Find the base item a ``baseItem`` reference points at.

    ``"longsword|phb"`` matches name and source case-insensitively; a bare
    name matches the first base item with that name.
    """
    if not isinstance(reference, str) or not reference.strip():
        return None

    if "|" in reference:
        name, source = (part.strip().lower() for part in reference.split("|", 1))
        for base in bases:
            if (
                str(base.get("name", "")).lower() == name
                and str(base.get("source", "")).lower() == source
            ):
                return base
        return None

    wanted = reference.strip().lower()
    for base in bases:
        if str(base.get("name", "")).lower() == wanted:
            return base
    return None


# ----------------------------------------------------------------------
# Managers
# ----------------------------------------------------------------------

class BaseItemManager(CatalogManager):
    kind = "baseitem"
    data_type = "item"
    corpus_file = "items-base.json"
    list_names = ("baseitem",)
    namespace = "item"
    per_record_dir = "item"
    is_base_item = True

    def __init__(self, ctx: RunContext, fluff: Optional[FluffIndex] = None):
        super().__init__(ctx)
        self.fluff = fluff

    def grouped_keys(self) -> List[str]:
        rules = self.ctx.key_rules
        return [*rules.weapon_keys, *rules.armor_keys]

    def skip_keys(self) -> Iterable[str]:
        return self.grouped_keys()

    def grouped(self, primary: Record, secondary: Optional[Record], keys: Sequence[str]) -> Optional[Dict[str, Any]]:
        block = build_grouped_block(
            primary,
            secondary,
            keys,
            self.key_sets.localized_keys,
            empty_value=self.ctx.empty_value,
        )
        return grouped_to_dict(block, self.ctx.primary_lang, self.ctx.secondary_lang)

    def decorate(self, record: MergedRecord, primary: Record, secondary: Optional[Record]) -> None:
        rules = self.ctx.key_rules
        record.set_extra("isBaseItem", self.is_base_item)
        record.set_extra("itemType", classify_item(primary))
        record.set_extra("weapon", self.grouped(primary, secondary, rules.weapon_keys))
        record.set_extra("armor", self.grouped(primary, secondary, rules.armor_keys))
        record.set_extra("charge", charge_block(primary))
        record.set_extra("bonus", bonus_block(primary))
        if self.fluff is not None:
            record.set_extra("full", self.fluff.full(record.id))


class ItemManager(BaseItemManager):
    kind = "item"
    corpus_file = "items.json"
    list_names = ("item", "itemGroup")
    is_base_item = False

    def __init__(
        self,
        ctx: RunContext,
        base_items: Optional[BaseItemManager] = None,
        fluff: Optional[FluffIndex] = None,
    ):
        super().__init__(ctx, fluff=fluff)
        self.base_items = base_items

    def skip_keys(self) -> Iterable[str]:
        return [*self.grouped_keys(), "items"]

    def decorate(self, record: MergedRecord, primary: Record, secondary: Optional[Record]) -> None:
        super().decorate(record, primary, secondary)

        reference = primary.get("baseItem")
        if reference:
            bases = self.base_items.primary if self.base_items else []
            base = resolve_base_item(reference, bases)
            base_key = None
            if base is not None:
                try:
                    base_key = self.base_items.get_id(base)
                except StructuralError:
                    base_key = None
            if base_key is None:
                self.ctx.anomalies.record(
                    self.name,
                    CROSS_REFERENCE,
                    f"{record.id}: unresolved baseItem {reference!r}",
                    key=record.id,
                )
                record.set_extra("baseItem", reference)
            else:
                record.set_extra("baseItem", base_key)

        if isinstance(primary.get("items"), list):
            group_items = primary["items"]
            if secondary is not None and isinstance(secondary.get("items"), list):
                group_items = secondary["items"]
            record.set_extra("items", group_items)
