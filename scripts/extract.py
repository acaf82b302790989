"""
CLI script for turning the mirrored pages into JSON records.

Items are always extracted (every other family resolves item names through
them); the requested families are written to the output directory.
"""

import argparse
import logging
import sys
from pathlib import Path

from osrs_data import terminal
from osrs_data.cache import CacheClient
from osrs_data.config import get_settings
from osrs_data.exceptions import ConfigurationError, OsrsDataError
from osrs_data.export import extract_all_templates
from osrs_data.pipeline import FAMILIES, ExtractionRun
from osrs_data.store import PageStore
from osrs_data.wiki import WikiClient

TEMPLATES_SUBDIR = "templates"


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract typed records from mirrored wiki pages")
    parser.add_argument(
        "--families",
        nargs="+",
        choices=FAMILIES,
        default=FAMILIES,
        help="Record families to export (default: all)",
    )
    parser.add_argument(
        "--output-dir", type=Path, default=None, help="Override the export directory"
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Do not contact the wiki; GE buy limits come from the cache or default to 0",
    )
    parser.add_argument(
        "--templates",
        action="store_true",
        help="Also write every template found on stored pages, one file per template name",
    )
    parser.add_argument("--dry-run", action="store_true", help="Extract without writing files")
    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(message)s",
    )
    cache = CacheClient(settings.cache_dir)

    client = None
    if not args.offline:
        try:
            client = WikiClient(settings)
        except ConfigurationError as e:
            terminal.warning(f"{e}; continuing offline")

    terminal.section_header(f"Extracting: {', '.join(args.families)}")
    try:
        with PageStore(settings.db_path) as store:
            run = ExtractionRun(store, settings, client=client, cache=cache)
            results = run.run(args.families)
            terminal.counts(
                "Records", {family: len(records) for family, records in results.items()}
            )
            terminal.key_value("Resolvable item names", len(run.resolver.names))

            if args.dry_run:
                terminal.info("\nDry run: nothing written")
                return

            paths = run.export(results, args.output_dir)
            for family, path in paths.items():
                terminal.key_value(family, str(path))
            terminal.success(f"Exported {len(paths)} file(s)")

            if args.templates:
                output_dir = args.output_dir or settings.output_dir
                written = extract_all_templates(store, output_dir / TEMPLATES_SUBDIR)
                terminal.success(f"Wrote {len(written)} template file(s)")
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
