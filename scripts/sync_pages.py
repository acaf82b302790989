"""
CLI script for mirroring the OSRS wiki into the local page store.

Steps, each selectable on its own:
1. Catalog every content page (allpages)
2. Tag pages per record family (categories, template usage)
3. Merge redirect titles into page aliases
4. Refresh revision ids so edited pages become stale
5. Fetch full content of stale pages, or ingest a Special:Export dump
"""

import argparse
import logging
import sys
from pathlib import Path

from osrs_data import terminal
from osrs_data.cache import CacheClient
from osrs_data.catalog import PageCatalog
from osrs_data.config import get_settings
from osrs_data.exceptions import ConfigurationError, OsrsDataError
from osrs_data.store import PageStore
from osrs_data.sync import ContentSync
from osrs_data.wiki import WikiClient

STEPS = ["pages", "tags", "aliases", "revisions", "content"]


def run_steps(
    steps: list[str],
    catalog: PageCatalog,
    content: ContentSync,
    dump: Path | None = None,
    download: bool = False,
) -> None:
    for number, name in enumerate(steps, start=1):
        terminal.step(number, len(steps), name.capitalize())

        if name == "pages":
            terminal.key_value("Registered", catalog.sync_page_list())
        elif name == "tags":
            tagged = catalog.tag_all()
            terminal.counts("Tagged pages", {tag.value: count for tag, count in tagged.items()})
        elif name == "aliases":
            terminal.key_value("Pages with new aliases", catalog.resolve_redirects_and_aliases())
        elif name == "revisions":
            terminal.key_value("Revisions refreshed", catalog.refresh_revisions())
        elif name == "content" and dump is not None:
            if download:
                content.download_dump(dump)
            report = content.ingest_dump(dump)
            terminal.key_value("Parsed", report.parsed)
            terminal.key_value("Saved", report.saved)
            if report.failed_chunks:
                terminal.warning(f"{report.failed_chunks} chunk(s) failed to save")
        elif name == "content":
            report = content.sync_stale_pages()
            terminal.key_value("Stale", report.checked)
            terminal.key_value("Fetched", report.fetched)
            terminal.key_value("Saved", report.saved)
            terminal.key_value("Skipped", report.skipped)
            if report.failed:
                terminal.warning(f"{report.failed} page(s) failed to fetch and stay stale")


def main() -> None:
    parser = argparse.ArgumentParser(description="Mirror OSRS wiki pages into the local store")
    parser.add_argument(
        "--steps",
        nargs="+",
        choices=STEPS,
        default=STEPS,
        help="Steps to run, in order (default: all)",
    )
    parser.add_argument(
        "--dump",
        type=Path,
        default=None,
        help="Ingest this Special:Export XML instead of fetching stale pages one by one",
    )
    parser.add_argument(
        "--download",
        action="store_true",
        help="Download a fresh export of every stored page to --dump before ingesting it",
    )
    parser.add_argument(
        "--clear-cache",
        nargs="*",
        metavar="TAG",
        help="Clear cache (optionally specify tags: catalog, ge) and exit",
    )
    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(message)s",
    )
    cache = CacheClient(settings.cache_dir)

    if args.clear_cache is not None:
        tags = args.clear_cache if args.clear_cache else None
        cache.clear_cache(tags)
        tag_str = f" ({', '.join(tags)})" if tags else " (all)"
        terminal.success(f"Cache cleared{tag_str}")
        return

    if args.download and args.dump is None:
        parser.error("--download requires --dump")

    try:
        client = WikiClient(settings)
    except ConfigurationError as e:
        terminal.error_with_context(
            str(e),
            suggestions=["Set OSRS_USER_AGENT to a contact string, e.g. 'my-bot (me@example.com)'"],
        )
        sys.exit(1)

    steps = [step for step in STEPS if step in args.steps]
    terminal.section_header(f"Wiki sync: {', '.join(steps)}")
    try:
        with PageStore(settings.db_path) as store:
            catalog = PageCatalog(client, store, settings, cache=cache)
            content = ContentSync(client, store, settings)
            run_steps(steps, catalog, content, dump=args.dump, download=args.download)
            terminal.success(f"Store now holds {store.count_pages()} page(s)")
    except OsrsDataError as e:
        terminal.error(str(e))
        sys.exit(1)
    except Exception as e:
        terminal.error(f"Unexpected error: {e}")
        sys.exit(1)
    finally:
        cache.close()


if __name__ == "__main__":
    main()
