"""
Item world spawns from ``{{ItemSpawnLine}}``.

Each line names an item and lists its coordinates as positional parameters:

    {{ItemSpawnLine|name=Bronze arrow|location=[[Lumbridge]]|members=No
    |3200,3200|3205,3210,1|3211,3212,plane:2,qty:5}}

The owning item comes from the page's own Item infobox when it has one
(item pages list where that item spawns); location pages fall back to
resolving the line's name.
"""

import logging

from osrs_data.extractors.items import ITEM_FIELDS
from osrs_data.models import ItemSpawn, Page, SpawnCoordinates
from osrs_data.resolver import EntityResolver, clean_name
from osrs_data.templates import clean_markup, first_template, parse_templates
from osrs_data.variants import FieldTable, coerce, expand_variants

log = logging.getLogger(__name__)

SPAWN_LINE = "ItemSpawnLine"
ITEM_INFOBOX = "Infobox Item"

_OWNER_FIELDS: FieldTable = {key: ITEM_FIELDS[key] for key in ("id", "name", "gemwname")}


def parse_coordinate(value: str) -> tuple[SpawnCoordinates, int] | None:
    """``"x,y[,plane][,plane:N][,qty:N]"`` -> (coordinates, quantity)."""
    parts = [part.strip() for part in value.split(",") if part.strip()]
    if len(parts) < 2 or not all(p.lstrip("-").isdigit() for p in parts[:2]):
        return None

    x, y = int(parts[0]), int(parts[1])
    plane, quantity = 0, 1
    for part in parts[2:]:
        key, sep, number = part.partition(":")
        if not sep:
            number, key = key, "plane"
        number = number.strip()
        if not number.isdigit():
            continue
        if key.strip().lower() == "plane":
            plane = int(number)
        elif key.strip().lower() in ("qty", "quantity"):
            quantity = max(int(number), 1)
    return SpawnCoordinates(x=x, y=y, plane=plane), quantity


class SpawnExtractor:
    def __init__(self, resolver: EntityResolver):
        self._resolver = resolver

    def __call__(self, page: Page) -> list[ItemSpawn] | None:
        return self.extract(page)

    def owner_ids(self, text: str) -> list[tuple[int, str]]:
        params = first_template(text, ITEM_INFOBOX)
        if not params:
            return []
        return [
            (record["id"], record.get("name", ""))
            for record in expand_variants(params, _OWNER_FIELDS)
        ]

    def _line_owner(self, name: str | None, owners: list[tuple[int, str]]) -> int | None:
        if len(owners) == 1:
            return owners[0][0]
        if owners:
            wanted = clean_name(name or "").lower()
            for item_id, owner_name in owners:
                if clean_name(owner_name).lower() == wanted:
                    return item_id
            # Lines for other items listed on a variant page
            return self._resolver.resolve_id(name) or owners[0][0]
        return self._resolver.resolve_id(name)

    def extract(self, page: Page) -> list[ItemSpawn] | None:
        lines = parse_templates(page.text, SPAWN_LINE)
        if not lines:
            return None

        owners = self.owner_ids(page.text or "")
        spawns = []
        for params in lines:
            name = clean_markup(params.get("name")) or page.title
            item_id = self._line_owner(name, owners)
            if item_id is None:
                log.info("Spawn line '%s' on %s does not match any item", name, page.title)
                continue

            positional = [value for key, value in params.items() if key.isdigit()]
            for value in positional:
                parsed = parse_coordinate(value)
                if parsed is None:
                    log.debug("Bad spawn coordinate '%s' on %s", value, page.title)
                    continue
                coordinates, quantity = parsed
                spawns.append(
                    ItemSpawn(
                        item_id=item_id,
                        item_name=name,
                        coordinates=coordinates,
                        quantity=quantity,
                        members=coerce(params.get("members"), "bool") or False,
                        location=clean_markup(params.get("location")),
                        page_id=page.id,
                    )
                )
        return spawns
