"""Item sets from the ``{{CostLine}}`` component list on set pages."""

import logging

from osrs_data.models import ItemSet, Page
from osrs_data.resolver import EntityResolver
from osrs_data.templates import clean_markup, parse_templates
from osrs_data.wiki import clean_display_title

log = logging.getLogger(__name__)

COST_LINE = "CostLine"


class SetExtractor:
    def __init__(self, resolver: EntityResolver):
        self._resolver = resolver

    def __call__(self, page: Page) -> ItemSet | None:
        return self.extract(page)

    def extract(self, page: Page) -> ItemSet | None:
        lines = parse_templates(page.text, COST_LINE)
        if not lines:
            log.debug("No components on set page %s (%d)", page.title, page.id)
            return None

        title = clean_display_title(page.title)
        component_ids = []
        for params in lines:
            name = clean_markup(params.get("1"))
            item_id = self._resolver.resolve_id(name)
            if item_id is None:
                log.info("Set %s: component '%s' does not match any item", title, name)
                continue
            component_ids.append(item_id)

        set_id = self._resolver.resolve_id(title)
        if set_id is None:
            log.warning("No item id for set %s", title)
        return ItemSet(id=set_id, name=title, component_ids=component_ids, page_id=page.id)
