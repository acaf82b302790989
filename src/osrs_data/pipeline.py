"""
One extraction run over the mirrored pages.

Items are extracted first because every other family refers to items by
name; the resolver is built from them once and shared read-only by the
dependent families. Each family is exported as its own JSON file.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel

from osrs_data.cache import CacheClient
from osrs_data.config import Settings, get_settings
from osrs_data.exceptions import WikiError
from osrs_data.exclusions import ExclusionRules, load_exclusions
from osrs_data.export import write_records
from osrs_data.extractors.base import extract_each
from osrs_data.extractors.items import ItemExtractor
from osrs_data.extractors.monsters import MonsterExtractor
from osrs_data.extractors.recipes import RecipeExtractor
from osrs_data.extractors.sets import SetExtractor
from osrs_data.extractors.shops import ShopExtractor
from osrs_data.extractors.spawns import SpawnExtractor
from osrs_data.models import FAMILY_MODELS, Item, ItemSet, Tag
from osrs_data.resolver import EntityResolver, load_name_overrides
from osrs_data.store import PageStore
from osrs_data.wiki import WikiClient

log = logging.getLogger(__name__)

FAMILIES = list(FAMILY_MODELS)


def dedupe_items(items: Iterable[Item]) -> list[Item]:
    unique: dict[int, Item] = {}
    for item in items:
        if item.id in unique:
            log.warning(
                "Item id %d on page %s already extracted from page %s, keeping the first",
                item.id,
                item.page_id,
                unique[item.id].page_id,
            )
            continue
        unique[item.id] = item
    return list(unique.values())


class ExtractionRun:
    def __init__(
        self,
        store: PageStore,
        settings: Settings | None = None,
        client: WikiClient | None = None,
        cache: CacheClient | None = None,
        rules: ExclusionRules | None = None,
        overrides: dict[str, int] | None = None,
        ge_limits: dict[str, int] | None = None,
    ):
        self._store = store
        self._settings = settings or get_settings()
        self._client = client
        self._cache = cache
        self._rules = rules
        self._overrides = overrides
        self._ge_limits = ge_limits
        self.resolver: EntityResolver | None = None

    def load_ge_limits(self) -> dict[str, int]:
        if self._ge_limits is not None:
            return self._ge_limits

        if self._cache:
            cached = self._cache.get_ge_limits()
            if cached is not None:
                log.info("Using cached GE limits (%d items)", len(cached))
                self._ge_limits = cached
                return cached

        if self._client is None:
            log.warning("No wiki client: buy limits default to 0")
            self._ge_limits = {}
            return self._ge_limits

        try:
            limits = self._client.fetch_ge_limits()
        except WikiError as e:
            log.warning("GE limits unavailable, buy limits default to 0: %s", e)
            limits = {}
        else:
            if self._cache:
                self._cache.set_ge_limits(limits)
        self._ge_limits = limits
        return limits

    def _prepare(self) -> None:
        if self._rules is None:
            self._rules = load_exclusions(self._settings.exclusions_path)
        if self._overrides is None:
            self._overrides = load_name_overrides(self._settings.overrides_path)

    def extract_items(self) -> list[Item]:
        self._prepare()
        extractor = ItemExtractor(self._rules, self.load_ge_limits())
        items = extract_each(self._store.get_pages_by_tag(Tag.ITEM), extractor, "items")
        return dedupe_items(items)

    def run(self, families: list[str] | None = None) -> dict[str, list[BaseModel]]:
        wanted = families or FAMILIES
        unknown = set(wanted) - set(FAMILIES)
        if unknown:
            raise ValueError(f"Unknown record families: {', '.join(sorted(unknown))}")

        items = self.extract_items()
        self.resolver = EntityResolver(items, self._overrides, self._settings).build()
        results: dict[str, list[BaseModel]] = {"items": items}

        item_sets: list[ItemSet] = []
        if "sets" in wanted or "recipes" in wanted:
            item_sets = extract_each(
                self._store.get_pages_by_tag(Tag.SET), SetExtractor(self.resolver), "sets"
            )
            results["sets"] = item_sets

        if "recipes" in wanted:
            recipe_extractor = RecipeExtractor(self.resolver)
            recipes = extract_each(
                self._store.get_pages_by_tag(Tag.ITEM), recipe_extractor, "recipes"
            )
            results["recipes"] = recipes + recipe_extractor.set_recipes(item_sets)

        if "shops" in wanted:
            results["shops"] = extract_each(
                self._store.get_pages_by_tag(Tag.SHOP), ShopExtractor(self.resolver), "shops"
            )
        if "monsters" in wanted:
            results["monsters"] = extract_each(
                self._store.get_pages_by_tag(Tag.MONSTER),
                MonsterExtractor(self.resolver),
                "monsters",
            )
        if "spawns" in wanted:
            results["spawns"] = extract_each(
                self._store.get_pages_by_tag(Tag.ITEM_SPAWN),
                SpawnExtractor(self.resolver),
                "spawns",
            )

        return {family: results[family] for family in FAMILIES if family in wanted}

    def export(
        self, results: dict[str, list[BaseModel]], output_dir: Path | None = None
    ) -> dict[str, Path]:
        output_dir = output_dir or self._settings.output_dir
        return {
            family: write_records(family, records, output_dir)
            for family, records in results.items()
        }
