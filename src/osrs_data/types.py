"""
Type definitions for MediaWiki API responses and sync bookkeeping.

TypedDicts mirror the JSON the wiki returns; NamedTuples are the slim rows
passed between the catalog, the store and the content sync.
"""

from datetime import datetime
from typing import NamedTuple, NotRequired, TypedDict


class ApiPageEntry(TypedDict):
    pageid: int
    title: str
    ns: NotRequired[int]


class RedirectEntry(TypedDict):
    pageid: int
    title: str
    ns: NotRequired[int]


class RedirectPage(TypedDict):
    pageid: NotRequired[int]
    title: str
    redirects: NotRequired[list[RedirectEntry]]
    missing: NotRequired[str]


class ParseProperty(TypedDict):
    name: str
    value: str


class SlimPage(NamedTuple):
    id: int
    title: str


class StalePage(NamedTuple):
    id: int
    title: str
    revision_id: int | None
    last_full_fetch_revision_id: int | None


class ParsedPage(NamedTuple):
    page_id: int
    title: str
    display_title: str
    revision_id: int
    html: str
    wikitext: str
    properties: list[ParseProperty]


class DumpPage(NamedTuple):
    id: int
    title: str
    namespace: int | None
    revision_id: int
    parent_id: int | None
    timestamp: datetime | None
    content_model: str | None
    text: str


class SyncReport(NamedTuple):
    checked: int
    fetched: int
    skipped: int
    failed: int
    saved: int


class IngestReport(NamedTuple):
    parsed: int
    saved: int
    failed_chunks: int
