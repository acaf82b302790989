"""Monsters from ``{{Infobox Monster}}`` with drops from ``{{DropsLine}}``."""

import logging

from osrs_data.exceptions import TemplateParseError
from osrs_data.models import Monster, MonsterDrop, Page
from osrs_data.resolver import EntityResolver
from osrs_data.templates import clean_markup, first_template, has_template, parse_templates
from osrs_data.variants import FieldSpec, FieldTable, expand_variants

log = logging.getLogger(__name__)

INFOBOX = "Infobox Monster"
DROPS_LINE = "DropsLine"

MONSTER_FIELDS: FieldTable = {
    "id": FieldSpec("ids", "ids"),
    "name": FieldSpec("name"),
    "version": FieldSpec("version"),
    "image": FieldSpec("image"),
    "examine": FieldSpec("examine", "text"),
    "members": FieldSpec("members", "bool"),
    "combat": FieldSpec("level", "int"),
    "size": FieldSpec("size", "int"),
    "hitpoints": FieldSpec("hitpoints", "int"),
    "max hit": FieldSpec("max_hit", "int"),
    "aggressive": FieldSpec("aggressive", "bool"),
    "poisonous": FieldSpec("poisonous", "bool"),
    "attack style": FieldSpec("attack_style", "text"),
    "attack speed": FieldSpec("attack_speed", "int"),
    "xpbonus": FieldSpec("xp_bonus", "float"),
    "slayxp": FieldSpec("slayer_xp", "float"),
    "cat": FieldSpec("category", "text"),
    "assignedby": FieldSpec("assigned_by", "list"),
    "respawn": FieldSpec("respawn_time", "int"),
    "dropversion": FieldSpec("drop_version"),
    "att": FieldSpec("combat_stats.attack", "int"),
    "str": FieldSpec("combat_stats.strength", "int"),
    "def": FieldSpec("combat_stats.defence", "int"),
    "mage": FieldSpec("combat_stats.magic", "int"),
    "range": FieldSpec("combat_stats.ranged", "int"),
    "attbns": FieldSpec("combat_stats.attack_bonus", "int"),
    "strbns": FieldSpec("combat_stats.strength_bonus", "int"),
    "amagic": FieldSpec("combat_stats.attack_magic", "int"),
    "mbns": FieldSpec("combat_stats.magic_bonus", "int"),
    "arange": FieldSpec("combat_stats.attack_ranged", "int"),
    "rngbns": FieldSpec("combat_stats.ranged_bonus", "int"),
    "dstab": FieldSpec("combat_stats.defence_stab", "int"),
    "dslash": FieldSpec("combat_stats.defence_slash", "int"),
    "dcrush": FieldSpec("combat_stats.defence_crush", "int"),
    "dmagic": FieldSpec("combat_stats.defence_magic", "int"),
    "drange": FieldSpec("combat_stats.defence_ranged", "int"),
    "immunepoison": FieldSpec("combat_stats.immune_poison", "bool"),
    "immunevenom": FieldSpec("combat_stats.immune_venom", "bool"),
    "immunecannon": FieldSpec("combat_stats.immune_cannon", "bool"),
    "immunethrall": FieldSpec("combat_stats.immune_thrall", "bool"),
}


def _clean_drop_value(value: str | None) -> str | None:
    cleaned = clean_markup(value)
    return cleaned.replace(",", "") if cleaned else None


class MonsterExtractor:
    def __init__(self, resolver: EntityResolver):
        self._resolver = resolver

    def __call__(self, page: Page) -> list[Monster] | None:
        return self.extract(page)

    def drops(self, text: str) -> list[MonsterDrop]:
        drops = []
        for params in parse_templates(text, DROPS_LINE):
            name = clean_markup(params.get("name"))
            if not name:
                continue
            item_id = self._resolver.resolve_id(name)
            if item_id is None:
                log.debug("Drop '%s' does not match any item", name)
                continue
            drops.append(
                MonsterDrop(
                    name=name,
                    item_id=item_id,
                    quantity=_clean_drop_value(params.get("quantity")),
                    rarity=_clean_drop_value(params.get("rarity")),
                )
            )
        return drops

    def extract(self, page: Page) -> list[Monster] | None:
        text = page.text
        if not text or not has_template(text, INFOBOX):
            return None

        params = first_template(text, INFOBOX)
        if not params:
            raise TemplateParseError(page.id, page.title, f"{INFOBOX} has no parameters")

        records = expand_variants(params, MONSTER_FIELDS, id_target="ids")
        if not records:
            log.debug("No monster ids on page %s (%d)", page.title, page.id)
            return None

        drops = self.drops(text)
        monsters = []
        for record in records:
            record["id"] = record["ids"][0]
            record.setdefault("name", page.title)
            record["drops"] = [drop.model_copy() for drop in drops]
            record["aliases"] = list(page.aliases)
            record["page_id"] = page.id
            monsters.append(Monster.model_validate(record))
        return monsters
