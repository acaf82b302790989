"""
Shared driver for per-page extraction.

Every family extracts records page by page; a page that fails for any reason
(missing template, malformed values, failed validation) is logged with its
identity and skipped so one bad page never stops a run over the whole wiki.
"""

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from pydantic import BaseModel

from osrs_data.exceptions import TemplateParseError
from osrs_data.models import Page

log = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

PageExtractor = Callable[[Page], RecordT | list[RecordT] | None]

_PROGRESS_EVERY = 500


def extract_page(page: Page, extractor: PageExtractor, family: str) -> list[RecordT]:
    try:
        result = extractor(page)
    except TemplateParseError as e:
        log.warning("Skipping %s page: %s", family, e)
        return []
    except Exception as e:
        log.warning("Skipping %s page %s (%d): %s", family, page.title, page.id, e)
        return []
    if result is None:
        return []
    if isinstance(result, list):
        return result
    return [result]


def extract_each(pages: Iterable[Page], extractor: PageExtractor, family: str) -> list[RecordT]:
    pages = list(pages)
    total = len(pages)
    records: list[RecordT] = []
    for i, page in enumerate(pages, start=1):
        if i % _PROGRESS_EVERY == 0:
            log.info("%s: %d/%d pages", family.capitalize(), i, total)
        records.extend(extract_page(page, extractor, family))
    log.info("%s: %d record(s) from %d page(s)", family.capitalize(), len(records), total)
    return records
