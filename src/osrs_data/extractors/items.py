"""
Items from ``{{Infobox Item}}`` (and ``{{Infobox Bonuses}}`` for equipment).

One page can describe several items through numbered variants (``id1``,
``id2``, ...); each variant becomes its own Item, linked to its siblings
through ``related_items``.
"""

import logging
from typing import Any

from osrs_data.exceptions import TemplateParseError
from osrs_data.exclusions import ExclusionRules
from osrs_data.models import Item, Page
from osrs_data.templates import first_template, has_template
from osrs_data.variants import FieldSpec, FieldTable, expand_variants, link_siblings
from osrs_data.wiki import clean_display_title

log = logging.getLogger(__name__)

INFOBOX = "Infobox Item"
BONUSES = "Infobox Bonuses"

# Bonus parameters are merged into the infobox under this prefix so both
# templates expand through the same variant slots.
_BONUS_PREFIX = "bonuses."

ITEM_FIELDS: FieldTable = {
    "id": FieldSpec("id", "id"),
    "name": FieldSpec("name"),
    # Listed after name so the exchange name wins when both are present
    "gemwname": FieldSpec("name"),
    "image": FieldSpec("image"),
    "examine": FieldSpec("examine", "text"),
    "destroy": FieldSpec("drop", "text"),
    "members": FieldSpec("is_members", "bool"),
    "tradeable": FieldSpec("is_tradeable", "bool"),
    "equipable": FieldSpec("is_equipable", "bool"),
    "stackable": FieldSpec("is_stackable", "bool"),
    "exchange": FieldSpec("is_on_exchange", "bool"),
    "alchable": FieldSpec("is_alchable", "bool"),
    "value": FieldSpec("value", "int"),
    "weight": FieldSpec("weight", "float"),
}

BONUS_FIELDS: FieldTable = {
    f"{_BONUS_PREFIX}{key}": FieldSpec(f"equipment_stats.{target}", kind)
    for key, target, kind in [
        ("astab", "attack_stab", "int"),
        ("aslash", "attack_slash", "int"),
        ("acrush", "attack_crush", "int"),
        ("amagic", "attack_magic", "int"),
        ("arange", "attack_ranged", "int"),
        ("dstab", "defence_stab", "int"),
        ("dslash", "defence_slash", "int"),
        ("dcrush", "defence_crush", "int"),
        ("dmagic", "defence_magic", "int"),
        ("drange", "defence_ranged", "int"),
        ("str", "strength", "int"),
        ("rstr", "ranged_strength", "int"),
        ("mdmg", "magic_damage", "float"),
        ("prayer", "prayer", "int"),
        ("slot", "slot", "str"),
        ("speed", "speed", "int"),
        ("attackrange", "attack_range", "int"),
        ("combatstyle", "combat_style", "str"),
    ]
}

ALL_FIELDS: FieldTable = {**ITEM_FIELDS, **BONUS_FIELDS}


def infobox_params(text: str) -> dict[str, str] | None:
    params = first_template(text, INFOBOX)
    if not params:
        return None
    bonuses = first_template(text, BONUSES) or {}
    return {**params, **{f"{_BONUS_PREFIX}{key}": value for key, value in bonuses.items()}}


class ItemExtractor:
    def __init__(self, rules: ExclusionRules, ge_limits: dict[str, int] | None = None):
        self._rules = rules
        self._ge_limits = ge_limits or {}

    def __call__(self, page: Page) -> list[Item] | None:
        return self.extract(page)

    def extract(self, page: Page) -> list[Item] | None:
        text = page.text
        if not text or not has_template(text, INFOBOX):
            return None

        params = infobox_params(text)
        if params is None:
            raise TemplateParseError(page.id, page.title, f"{INFOBOX} has no parameters")

        exclusion = self._rules.match(page.title, text, params)
        if exclusion:
            log.debug("Page %s is not main game content: %s", page.title, exclusion)

        records = link_siblings(expand_variants(params, ALL_FIELDS))
        if not records:
            log.debug("No item ids on page %s (%d)", page.title, page.id)
            return None

        fallback_name = clean_display_title(page.title)
        items = []
        for record in records:
            record.setdefault("name", fallback_name)
            self._finish(record, page, exclusion is None)
            items.append(Item.model_validate(record))
        return items

    def _finish(self, record: dict[str, Any], page: Page, in_main_game: bool) -> None:
        record["is_in_main_game"] = in_main_game
        record["buy_limit"] = self._ge_limits.get(record["name"], 0)
        record["aliases"] = list(page.aliases)
        record["page_id"] = page.id
