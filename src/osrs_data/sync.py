"""
Content sync: keeps the text and rendered HTML of cataloged pages current.

Two strategies feed the same PageStore:

- incremental: every stale page (revision moved past its last full fetch) is
  fetched through ``action=parse`` and saved in small batches;
- bulk: a Special:Export XML document is streamed and upserted in large
  chunks, which is how a fresh mirror is seeded.

A page's full-fetch revision only moves inside a committed batch, so a
failed batch leaves its pages stale for the next run.
"""

import logging
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

from lxml import etree

from osrs_data.config import Settings, get_settings
from osrs_data.exceptions import StorageError, WikiError
from osrs_data.store import PageStore
from osrs_data.types import DumpPage, IngestReport, ParsedPage, SyncReport
from osrs_data.wiki import WikiClient

log = logging.getLogger(__name__)

_PROGRESS_EVERY = 100

# Export schema versions differ only in namespace (export-0.10, export-0.11, ...)
_PAGE_TAG = "{*}page"


def _child_text(elem: etree._Element | None, name: str) -> str | None:
    if elem is None:
        return None
    child = elem.find(f"{{*}}{name}")
    return child.text if child is not None else None


def _optional_int(value: str | None) -> int | None:
    return int(value) if value and value.strip().isdigit() else None


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        log.warning("Unparseable revision timestamp '%s'", value)
        return None


def _release(elem: etree._Element) -> None:
    elem.clear()
    # Detach already processed pages so the tree never grows with the dump
    while elem.getprevious() is not None:
        del elem.getparent()[0]


def _dump_page(elem: etree._Element) -> DumpPage | None:
    revision = elem.find("{*}revision")
    page_id = _optional_int(_child_text(elem, "id"))
    revision_id = _optional_int(_child_text(revision, "id"))
    title = _child_text(elem, "title")
    if page_id is None or revision_id is None or not title:
        log.warning("Skipping export page without id/revision: %s", title)
        return None
    return DumpPage(
        id=page_id,
        title=title,
        namespace=_optional_int(_child_text(elem, "ns")),
        revision_id=revision_id,
        parent_id=_optional_int(_child_text(revision, "parentid")),
        timestamp=_parse_timestamp(_child_text(revision, "timestamp")),
        content_model=_child_text(revision, "model"),
        text=_child_text(revision, "text") or "",
    )


def iter_dump_pages(path: Path) -> Iterator[DumpPage]:
    """Stream the <page> records of a MediaWiki export, whatever its schema version."""
    context = etree.iterparse(str(path), events=("end",), tag=_PAGE_TAG)
    try:
        for _, elem in context:
            page = _dump_page(elem)
            _release(elem)
            if page is not None:
                yield page
    except etree.XMLSyntaxError as e:
        raise WikiError(f"Malformed export document {path}: {e}") from e


class ContentSync:
    def __init__(self, client: WikiClient, store: PageStore, settings: Settings | None = None):
        self._client = client
        self._store = store
        self._settings = settings or get_settings()

    def fetch_page(self, page_id: int) -> ParsedPage | None:
        """
        Fetch the full content of a page, or return None without touching the
        network when the stored copy is already at its latest revision.
        """
        page = self._store.get_page(page_id)
        if page is None or not page.is_stale:
            title = page.title if page else "?"
            log.debug("Not refreshing page %s (%d): already have latest revision", title, page_id)
            return None
        return self._client.parse_page(page_id)

    def _flush(self, buffer: list[ParsedPage]) -> int:
        if not buffer:
            return 0
        try:
            self._store.save_fetched_pages(buffer)
        except StorageError as e:
            log.error("Dropping batch of %d fetched page(s), they stay stale: %s", len(buffer), e)
            return 0
        log.debug("Saved %d fetched page(s)", len(buffer))
        return len(buffer)

    def sync_stale_pages(self) -> SyncReport:
        stale = self._store.select_stale_pages()
        total = len(stale)
        batch_size = self._settings.content_batch_size
        log.info("Content sync: %d stale page(s)", total)

        buffer: list[ParsedPage] = []
        fetched = skipped = failed = saved = 0
        for i, page in enumerate(stale, start=1):
            if i % _PROGRESS_EVERY == 0:
                log.info("Content sync: %d/%d", i, total)
            try:
                parsed = self.fetch_page(page.id)
            except WikiError as e:
                log.error("Failed to fetch page %s (%d): %s", page.title, page.id, e)
                failed += 1
                continue
            if parsed is None:
                skipped += 1
                continue

            fetched += 1
            buffer.append(parsed)
            if len(buffer) >= batch_size:
                saved += self._flush(buffer)
                buffer = []

        saved += self._flush(buffer)
        log.info(
            "Content sync done: %d fetched, %d saved, %d skipped, %d failed",
            fetched,
            saved,
            skipped,
            failed,
        )
        return SyncReport(
            checked=total, fetched=fetched, skipped=skipped, failed=failed, saved=saved
        )

    def ingest_dump(self, path: Path, mark_fetched: bool = True) -> IngestReport:
        chunk_size = self._settings.dump_chunk_size
        parsed = saved = failed_chunks = 0
        chunk: list[DumpPage] = []

        def flush() -> None:
            nonlocal saved, failed_chunks
            if not chunk:
                return
            try:
                self._store.upsert_dump_pages(chunk, mark_fetched=mark_fetched)
            except StorageError as e:
                log.error("Dropping export chunk of %d page(s): %s", len(chunk), e)
                failed_chunks += 1
            else:
                saved += len(chunk)
                log.info("Ingested %d page(s) from export", saved)
            chunk.clear()

        for page in iter_dump_pages(path):
            parsed += 1
            chunk.append(page)
            if len(chunk) >= chunk_size:
                flush()
        flush()

        return IngestReport(parsed=parsed, saved=saved, failed_chunks=failed_chunks)

    def download_dump(self, path: Path, titles: list[str] | None = None) -> Path:
        if titles is None:
            titles = [p.title for p in self._store.list_slim_pages()]
        content = self._client.export_pages(titles)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        log.info("Wrote export of %d page(s) to %s", len(titles), path)
        return path
