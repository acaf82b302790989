"""
SQLite store for the mirrored wiki pages and their category tags.

Two tables: ``page`` keyed by the wiki page id, and ``page_tag`` keyed by
(page id, tag). Every batch write runs in a single transaction: it either
lands completely or raises StorageError and leaves the previous rows intact.
"""

import json
import logging
import sqlite3
from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime
from pathlib import Path

from osrs_data.exceptions import StorageError
from osrs_data.models import Page, Tag
from osrs_data.types import DumpPage, ParsedPage, SlimPage, StalePage

log = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS page (
    id INTEGER PRIMARY KEY NOT NULL,
    title TEXT NOT NULL,
    namespace INTEGER,
    revision_id INTEGER,
    parent_id INTEGER,
    timestamp TEXT,
    content_model TEXT,
    text TEXT,
    html TEXT,
    display_title TEXT,
    properties TEXT NOT NULL DEFAULT '[]',
    full_revision_id INTEGER,
    aliases TEXT NOT NULL DEFAULT '[]'
);

CREATE TABLE IF NOT EXISTS page_tag (
    page_id INTEGER NOT NULL,
    tag TEXT NOT NULL,
    PRIMARY KEY (page_id, tag)
);

CREATE INDEX IF NOT EXISTS idx_page_tag_tag ON page_tag(tag);
"""

_PAGE_COLUMNS = (
    "id, title, namespace, revision_id, parent_id, timestamp, content_model, "
    "text, html, display_title, properties, full_revision_id, aliases"
)
_TAGGED_PAGE_COLUMNS = ", ".join(f"p.{column.strip()}" for column in _PAGE_COLUMNS.split(","))


def _row_to_page(row: sqlite3.Row) -> Page:
    timestamp = datetime.fromisoformat(row["timestamp"]) if row["timestamp"] else None
    return Page(
        id=row["id"],
        title=row["title"],
        namespace=row["namespace"],
        revision_id=row["revision_id"],
        parent_id=row["parent_id"],
        timestamp=timestamp,
        content_model=row["content_model"],
        text=row["text"],
        html=row["html"],
        display_title=row["display_title"],
        properties=json.loads(row["properties"] or "[]"),
        last_full_fetch_revision_id=row["full_revision_id"],
        aliases=json.loads(row["aliases"] or "[]"),
    )


class PageStore:
    def __init__(self, db_path: Path | str):
        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(db_path))
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(SCHEMA)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "PageStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _batch(self, sql: str, rows: Sequence[tuple], what: str) -> None:
        try:
            with self._conn:
                self._conn.executemany(sql, rows)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write {len(rows)} {what}: {e}") from e
        log.debug("Wrote %d %s", len(rows), what)

    # --- Reads ---

    def get_page(self, page_id: int) -> Page | None:
        row = self._conn.execute(
            f"SELECT {_PAGE_COLUMNS} FROM page WHERE id = ?", (page_id,)
        ).fetchone()
        return _row_to_page(row) if row else None

    def iter_pages(self) -> Iterator[Page]:
        for row in self._conn.execute(f"SELECT {_PAGE_COLUMNS} FROM page ORDER BY id"):
            yield _row_to_page(row)

    def list_slim_pages(self) -> list[SlimPage]:
        rows = self._conn.execute("SELECT id, title FROM page ORDER BY id").fetchall()
        return [SlimPage(row["id"], row["title"]) for row in rows]

    def count_pages(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM page").fetchone()[0]

    def select_stale_pages(self) -> list[StalePage]:
        rows = self._conn.execute(
            """
            SELECT id, title, revision_id, full_revision_id FROM page
            WHERE full_revision_id IS NULL OR revision_id IS NOT full_revision_id
            ORDER BY id
            """
        ).fetchall()
        return [
            StalePage(row["id"], row["title"], row["revision_id"], row["full_revision_id"])
            for row in rows
        ]

    def get_pages_by_tag(self, tag: Tag) -> list[Page]:
        rows = self._conn.execute(
            f"""
            SELECT {_TAGGED_PAGE_COLUMNS}
            FROM page p JOIN page_tag t ON t.page_id = p.id
            WHERE t.tag = ?
            ORDER BY p.id
            """,
            (tag.value,),
        ).fetchall()
        return [_row_to_page(row) for row in rows]

    def get_tags(self, page_id: int) -> set[Tag]:
        rows = self._conn.execute("SELECT tag FROM page_tag WHERE page_id = ?", (page_id,))
        return {Tag(row["tag"]) for row in rows}

    def get_aliases(self) -> dict[int, list[str]]:
        rows = self._conn.execute("SELECT id, aliases FROM page ORDER BY id")
        return {row["id"]: json.loads(row["aliases"] or "[]") for row in rows}

    def count_tags(self, tag: Tag) -> int:
        return self._conn.execute(
            "SELECT COUNT(*) FROM page_tag WHERE tag = ?", (tag.value,)
        ).fetchone()[0]

    # --- Writes ---

    def upsert_slim_pages(self, pages: Iterable[SlimPage]) -> None:
        rows = [(p.id, p.title) for p in pages]
        self._batch(
            """
            INSERT INTO page (id, title) VALUES (?, ?)
            ON CONFLICT(id) DO UPDATE SET title = excluded.title
            """,
            rows,
            "slim pages",
        )

    def add_tags(self, page_ids: Iterable[int], tag: Tag) -> None:
        rows = [(page_id, tag.value) for page_id in page_ids]
        self._batch("INSERT OR IGNORE INTO page_tag (page_id, tag) VALUES (?, ?)", rows, "tags")

    def update_aliases(self, aliases_by_page: dict[int, list[str]]) -> None:
        rows = [(json.dumps(aliases), page_id) for page_id, aliases in aliases_by_page.items()]
        self._batch("UPDATE page SET aliases = ? WHERE id = ?", rows, "alias updates")

    def save_fetched_pages(self, pages: Sequence[ParsedPage]) -> None:
        rows = [
            (
                p.html,
                p.wikitext,
                p.display_title,
                json.dumps(p.properties),
                p.revision_id,
                p.revision_id,
                p.page_id,
            )
            for p in pages
        ]
        self._batch(
            """
            UPDATE page
            SET html = ?, text = ?, display_title = ?, properties = ?,
                revision_id = ?, full_revision_id = ?
            WHERE id = ?
            """,
            rows,
            "fetched pages",
        )

    def upsert_dump_pages(self, pages: Sequence[DumpPage], mark_fetched: bool = True) -> None:
        rows = [
            (
                p.id,
                p.title,
                p.namespace,
                p.revision_id,
                p.parent_id,
                p.timestamp.isoformat() if p.timestamp else None,
                p.content_model,
                p.text,
                p.revision_id if mark_fetched else None,
            )
            for p in pages
        ]
        full_revision_update = (
            "full_revision_id = excluded.full_revision_id" if mark_fetched
            else "full_revision_id = page.full_revision_id"
        )
        self._batch(
            f"""
            INSERT INTO page (
                id, title, namespace, revision_id, parent_id, timestamp,
                content_model, text, full_revision_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                title = excluded.title,
                namespace = excluded.namespace,
                revision_id = excluded.revision_id,
                parent_id = excluded.parent_id,
                timestamp = excluded.timestamp,
                content_model = excluded.content_model,
                text = excluded.text,
                {full_revision_update}
            """,
            rows,
            "dump pages",
        )

    def update_revisions(self, revisions: dict[int, int]) -> None:
        """Record the latest remote revisions; pages whose revision moved become stale."""
        rows = [(revision_id, page_id) for page_id, revision_id in revisions.items()]
        self._batch("UPDATE page SET revision_id = ? WHERE id = ?", rows, "revision updates")
