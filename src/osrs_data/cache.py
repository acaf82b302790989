"""
Cache layer for auxiliary wiki data using diskcache.

Page content lives in the SQLite mirror; this cache only holds the small
side lookups an extraction run needs (GE buy limits, page list snapshots),
so repeated runs in a day don't hit the wiki again. Entries are tagged for
selective clearing.
"""

from pathlib import Path

from diskcache import Cache as DiskCache

from osrs_data.types import SlimPage

_GE_LIMITS_TTL = 86400
_PAGE_LIST_TTL = 6 * 3600


class CacheClient:
    def __init__(self, cache_dir: Path):
        self._cache_dir = cache_dir
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        self._cache = DiskCache(str(self._cache_dir))

    def get_ge_limits(self) -> dict[str, int] | None:
        return self._cache.get("ge:limits")

    def set_ge_limits(self, limits: dict[str, int]) -> None:
        self._cache.set("ge:limits", limits, expire=_GE_LIMITS_TTL, tag="ge")

    def get_page_list(self, source: str) -> list[SlimPage] | None:
        cached = self._cache.get(f"catalog:{source}")
        if cached is None:
            return None
        return [SlimPage(*row) for row in cached]

    def set_page_list(self, source: str, pages: list[SlimPage]) -> None:
        self._cache.set(
            f"catalog:{source}",
            [tuple(p) for p in pages],
            expire=_PAGE_LIST_TTL,
            tag="catalog",
        )

    def clear_cache(self, tags: list[str] | None = None) -> None:
        if tags:
            for tag in tags:
                self._cache.evict(tag)
        else:
            self._cache.clear()

    def close(self) -> None:
        self._cache.close()
