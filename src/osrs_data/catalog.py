"""
Page catalog: which wiki pages exist, which family each belongs to, and
which redirect titles point at them.

Discovery runs paginated list queries through WikiClient and registers slim
(id, title) rows in the PageStore. Tagging and alias merging are idempotent,
so the whole catalog can be refreshed on every run.
"""

import logging
from collections.abc import Iterable
from typing import Any, NamedTuple

from osrs_data.cache import CacheClient
from osrs_data.config import Settings, get_settings
from osrs_data.exceptions import StorageError, WikiError
from osrs_data.models import Page, Tag
from osrs_data.store import PageStore
from osrs_data.types import ApiPageEntry, RedirectPage, SlimPage
from osrs_data.wiki import WikiClient

log = logging.getLogger(__name__)


class TagSource(NamedTuple):
    kind: str  # "category" or "template"
    name: str


TAG_SOURCES: dict[Tag, TagSource] = {
    Tag.ITEM: TagSource("category", "Items"),
    Tag.GE_ITEM: TagSource("category", "Grand Exchange items"),
    Tag.SET: TagSource("category", "Item sets"),
    Tag.SHOP: TagSource("category", "Shops"),
    Tag.MONSTER: TagSource("category", "Monsters"),
    Tag.ITEM_SPAWN: TagSource("template", "ItemSpawnLine"),
}


def _chunks(values: list[Any], size: int) -> Iterable[list[Any]]:
    for start in range(0, len(values), size):
        yield values[start : start + size]


def _slim(entries: Iterable[ApiPageEntry]) -> list[SlimPage]:
    return [SlimPage(entry["pageid"], entry["title"]) for entry in entries]


def merge_aliases(existing: list[str], found: Iterable[str]) -> list[str]:
    """Append new titles after the existing ones, keeping order and dropping repeats."""
    merged = list(existing)
    for title in found:
        if title not in merged:
            merged.append(title)
    return merged


class PageCatalog:
    def __init__(
        self,
        client: WikiClient,
        store: PageStore,
        settings: Settings | None = None,
        cache: CacheClient | None = None,
    ):
        self._client = client
        self._store = store
        self._settings = settings or get_settings()
        self._cache = cache

    def _collect(
        self, source: str, continue_key: str, result_key: str, params: dict[str, Any]
    ) -> list[SlimPage]:
        if self._cache:
            cached = self._cache.get_page_list(source)
            if cached is not None:
                log.info("Using cached page list for %s (%d pages)", source, len(cached))
                return cached

        pages: list[SlimPage] = []
        try:
            for batch in self._client.paginate(continue_key, result_key, params, strict=True):
                pages.extend(_slim(batch))
        except WikiError:
            # Truncated listings serve this run only and are never cached
            log.warning("Page list for %s is incomplete (%d pages)", source, len(pages))
            return pages

        if self._cache and pages:
            self._cache.set_page_list(source, pages)
        return pages

    # --- Discovery ---

    def discover_all_pages(self) -> list[SlimPage]:
        params = {
            "action": "query",
            "list": "allpages",
            "aplimit": "max",
            "apfilterredir": "nonredirects",
            "apminsize": str(self._settings.min_page_size),
        }
        pages = self._collect("allpages", "apcontinue", "allpages", params)
        log.info("Discovered %d content page(s)", len(pages))
        return pages

    def discover_by_category(self, category: str) -> list[SlimPage]:
        params = {
            "action": "query",
            "list": "categorymembers",
            "cmtitle": f"Category:{category}",
            "cmlimit": "max",
        }
        pages = self._collect(
            f"category:{category}", "cmcontinue", "categorymembers", params
        )
        pages = [p for p in pages if not p.title.startswith("Category:")]
        log.info("Category '%s': %d page(s)", category, len(pages))
        return pages

    def discover_by_template_usage(self, template: str) -> list[SlimPage]:
        params = {
            "action": "query",
            "list": "embeddedin",
            "eititle": f"Template:{template}",
            "einamespace": "0",
            "eilimit": "max",
        }
        pages = self._collect(f"template:{template}", "eicontinue", "embeddedin", params)
        log.info("Template '%s' is used by %d content page(s)", template, len(pages))
        return pages

    def register_pages(self, pages: list[SlimPage]) -> bool:
        try:
            self._store.upsert_slim_pages(pages)
        except StorageError as e:
            log.error("Dropping batch of %d slim page(s): %s", len(pages), e)
            return False
        return True

    def sync_page_list(self) -> int:
        pages = self.discover_all_pages()
        if pages and self.register_pages(pages):
            log.info("Registered %d page(s)", len(pages))
            return len(pages)
        return 0

    # --- Tagging ---

    def tag_pages(self, page_ids: Iterable[int], tag: Tag) -> bool:
        ids = list(dict.fromkeys(page_ids))
        if not ids:
            return True
        try:
            self._store.add_tags(ids, tag)
        except StorageError as e:
            log.error("Dropping tag batch '%s' of %d page(s): %s", tag.value, len(ids), e)
            return False
        log.info("Tagged %d page(s) as '%s'", len(ids), tag.value)
        return True

    def discover_tag(self, tag: Tag) -> list[SlimPage]:
        source = TAG_SOURCES[tag]
        if source.kind == "template":
            return self.discover_by_template_usage(source.name)
        return self.discover_by_category(source.name)

    def tag_family(self, tag: Tag) -> int:
        pages = self.discover_tag(tag)
        if not pages or not self.tag_pages((p.id for p in pages), tag):
            return 0
        return len(pages)

    def tag_all(self) -> dict[Tag, int]:
        return {tag: self.tag_family(tag) for tag in TAG_SOURCES}

    def pages_with_tag(self, tag: Tag) -> list[Page]:
        return self._store.get_pages_by_tag(tag)

    # --- Redirects and revisions ---

    def resolve_redirects_and_aliases(self) -> int:
        """
        Union every redirect title into the alias list of the page it targets.

        Only pages whose alias list actually changed are written. Returns the
        number of updated pages.
        """
        pages = self._store.list_slim_pages()
        titles = [p.title for p in pages]
        chunk_size = self._settings.redirect_chunk_size
        total_chunks = (len(titles) + chunk_size - 1) // chunk_size

        found: dict[int, list[str]] = {}
        for number, chunk in enumerate(_chunks(titles, chunk_size), start=1):
            log.debug("Querying redirects: chunk %d/%d", number, total_chunks)
            params = {
                "action": "query",
                "prop": "redirects",
                "rdlimit": "max",
                "titles": "|".join(chunk),
            }
            for batch in self._client.paginate("rdcontinue", "pages", params):
                for entry in batch:
                    self._collect_redirects(entry, found)

        existing = self._store.get_aliases()
        changed: dict[int, list[str]] = {}
        for page_id, redirects in found.items():
            if page_id not in existing:
                continue
            merged = merge_aliases(existing[page_id], redirects)
            if merged != existing[page_id]:
                changed[page_id] = merged

        if not changed:
            log.info("Aliases already up to date")
            return 0
        try:
            self._store.update_aliases(changed)
        except StorageError as e:
            log.error("Dropping alias batch of %d page(s): %s", len(changed), e)
            return 0
        log.info("Updated aliases on %d page(s)", len(changed))
        return len(changed)

    @staticmethod
    def _collect_redirects(entry: RedirectPage, found: dict[int, list[str]]) -> None:
        page_id = entry.get("pageid")
        if page_id is None or "missing" in entry:
            return
        titles = [redirect["title"] for redirect in entry.get("redirects", [])]
        found[page_id] = merge_aliases(found.get(page_id, []), titles)

    def refresh_revisions(self) -> int:
        """
        Pull the latest revision id of every stored page, so pages edited on
        the wiki since their last full fetch show up as stale.
        """
        page_ids = [p.id for p in self._store.list_slim_pages()]
        revisions: dict[int, int] = {}
        for chunk in _chunks(page_ids, self._settings.redirect_chunk_size):
            try:
                data = self._client.query(
                    {
                        "action": "query",
                        "prop": "info",
                        "pageids": "|".join(str(page_id) for page_id in chunk),
                    }
                )
            except WikiError as e:
                log.error("Skipping revision chunk of %d page(s): %s", len(chunk), e)
                continue
            for entry in ((data.get("query") or {}).get("pages") or {}).values():
                if "lastrevid" in entry and "missing" not in entry:
                    revisions[int(entry["pageid"])] = int(entry["lastrevid"])

        if not revisions:
            return 0
        try:
            self._store.update_revisions(revisions)
        except StorageError as e:
            log.error("Dropping revision batch of %d page(s): %s", len(revisions), e)
            return 0
        log.info("Refreshed revisions of %d page(s)", len(revisions))
        return len(revisions)
