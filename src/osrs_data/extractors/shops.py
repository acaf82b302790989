"""
Shops from the ``{{StoreTableHead}}`` / ``{{StoreLine}}`` table on shop pages.

Both templates are flat ``key=value`` lists on a single line, so they are
read with targeted patterns instead of a full parse:

    {{StoreTableHead|sellmultiplier=1300|buymultiplier=700|delta=30}}
    {{StoreLine|name=Small fishing net|stock=5|restock=100}}
"""

import logging
import re

from osrs_data.models import Page, Shop, ShopItem
from osrs_data.resolver import EntityResolver
from osrs_data.templates import clean_markup

log = logging.getLogger(__name__)

_HEAD_RE = re.compile(r"\{\{\s*StoreTableHead\s*\|(.*?)\}\}", re.IGNORECASE)
_LINE_RE = re.compile(r"\{\{\s*StoreLine\s*\|(.*?)\}\}\s*$", re.IGNORECASE | re.MULTILINE)

DEFAULT_CURRENCY = "Coins"


def parse_pairs(body: str) -> dict[str, str]:
    pairs = {}
    for part in body.split("|"):
        key, sep, value = part.partition("=")
        if not sep or not value.strip():
            continue
        pairs[key.strip().lower()] = value.strip()
    return pairs


def _int_or_none(value: str | None) -> int | None:
    if value is None:
        return None
    value = value.replace(",", "").strip()
    return int(value) if value.lstrip("-").isdigit() else None


def _per_mille(pairs: dict[str, str], key: str) -> float:
    value = _int_or_none(pairs.get(key))
    return value / 1000 if value is not None else 0.0


class ShopExtractor:
    def __init__(self, resolver: EntityResolver):
        self._resolver = resolver

    def __call__(self, page: Page) -> Shop | None:
        return self.extract(page)

    def inventory(self, text: str) -> list[ShopItem]:
        items = []
        for match in _LINE_RE.finditer(text):
            pairs = parse_pairs(match.group(1))
            name = clean_markup(pairs.get("name"))
            item_id = self._resolver.resolve_id(name)
            if item_id is None:
                log.debug("Shop item '%s' does not match any item", name)
                continue
            items.append(
                ShopItem(
                    item_id=item_id,
                    base_stock=_int_or_none(pairs.get("stock")),
                    restock_ticks=_int_or_none(pairs.get("restock")),
                )
            )
        return items

    def extract(self, page: Page) -> Shop | None:
        text = page.text
        if not text:
            return None
        head = _HEAD_RE.search(text)
        if not head:
            log.debug("No shop table on page %s (%d)", page.title, page.id)
            return None

        pairs = parse_pairs(head.group(1))
        return Shop(
            name=page.title,
            page_id=page.id,
            sell_multiplier=_per_mille(pairs, "sellmultiplier"),
            buy_multiplier=_per_mille(pairs, "buymultiplier"),
            restock_delta=_per_mille(pairs, "delta"),
            currency=clean_markup(pairs.get("currency")) or DEFAULT_CURRENCY,
            inventory=self.inventory(text),
        )
