"""
Name to item resolution for cross-family references.

Recipes, shops, sets and drop tables refer to items by the name an editor
typed, which may be the display name, a redirect title or something close to
the item's image file. EntityResolver owns three read-only indices built once
per extraction run from the extracted items and settles collisions by a
weight that favours current, tradeable Grand Exchange items.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType

import yaml

from osrs_data.config import Settings, get_settings
from osrs_data.exceptions import ConfigurationError, ResolutionError
from osrs_data.models import Item

log = logging.getLogger(__name__)

_FILE_PREFIX_RE = re.compile(r"^(?:file|image)\s*:\s*", re.IGNORECASE)
_EXTENSION_RE = re.compile(r"\.(?:png|gif|jpe?g|svg|webp)$", re.IGNORECASE)


def clean_name(name: str) -> str:
    return re.sub(r"\s+", " ", name.replace("\n", " ").replace("\r", " ")).strip()


def _key(name: str | None) -> str:
    # Wiki titles are case-insensitive on the first character only
    if not name:
        return ""
    cleaned = clean_name(name.replace("_", " "))
    return cleaned[:1].upper() + cleaned[1:]


def file_name_from_image(image: str | None) -> str | None:
    """
    Derive an item name from its infobox image reference.

    Examples:
        "[[File:Torch (lit).png]]" -> "Torch (lit)"
        "File:Bronze arrow 5.png|link=x" -> "Bronze arrow 5"
    """
    if not image:
        return None
    value = image.strip().removeprefix("[[").split("]]")[0].split("|")[0]
    value = _EXTENSION_RE.sub("", _FILE_PREFIX_RE.sub("", value.strip()))
    return clean_name(value.replace("_", " ")) or None


def load_name_overrides(path: Path) -> dict[str, int]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            overrides: dict[str, int] = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in name overrides {path}: {e}") from e
    return {_key(name): int(item_id) for name, item_id in overrides.items()}


class EntityResolver:
    def __init__(
        self,
        items: Iterable[Item],
        overrides: dict[str, int] | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self._items = list(items)
        self._overrides = {_key(name): item_id for name, item_id in (overrides or {}).items()}
        self._weights = (
            settings.weight_main_game,
            settings.weight_exchange,
            settings.weight_tradeable,
        )
        self._built = False
        self._by_id: dict[int, Item] = {}
        self._by_name: dict[str, Item] = {}
        self._by_alias: dict[str, Item] = {}
        self._by_file_name: dict[str, Item] = {}

    def weight(self, item: Item) -> int:
        main_game, exchange, tradeable = self._weights
        return (
            main_game * item.is_in_main_game
            + exchange * item.is_on_exchange
            + tradeable * item.is_tradeable
        )

    def _claim(self, index: dict[str, Item], key: str, item: Item) -> None:
        if not key:
            return
        current = index.get(key)
        if current is None or self.weight(item) > self.weight(current):
            index[key] = item

    def build(self) -> "EntityResolver":
        if self._built:
            return self

        for item in self._items:
            self._by_id.setdefault(item.id, item)
            self._claim(self._by_name, _key(item.name), item)
            for alias in item.aliases:
                self._claim(self._by_alias, _key(alias), item)
                if alias.count("(") > alias.count(")"):
                    self._claim(self._by_alias, _key(alias + ")"), item)
            self._claim(self._by_file_name, _key(file_name_from_image(item.image)), item)

        self._built = True
        log.info(
            "Resolver built: %d item(s), %d name(s), %d alias(es), %d file name(s)",
            len(self._by_id),
            len(self._by_name),
            len(self._by_alias),
            len(self._by_file_name),
        )
        return self

    @property
    def names(self) -> Mapping[str, Item]:
        return MappingProxyType(self.build()._by_name)

    def get_by_id(self, item_id: int) -> Item | None:
        return self.build()._by_id.get(item_id)

    def get_by_name(self, name: str) -> Item | None:
        return self.build()._by_name.get(_key(name))

    def get_by_alias(self, name: str) -> Item | None:
        return self.build()._by_alias.get(_key(name))

    def get_by_file_name(self, name: str) -> Item | None:
        return self.build()._by_file_name.get(_key(name))

    def resolve(self, name: str | None) -> Item | None:
        if not name:
            return None
        key = _key(name)
        if key in self._overrides:
            return self.get_by_id(self._overrides[key])
        return self.get_by_name(key) or self.get_by_alias(key) or self.get_by_file_name(key)

    def resolve_id(self, name: str | None) -> int | None:
        if not name:
            return None
        key = _key(name)
        if key in self._overrides:
            return self._overrides[key]
        item = self.resolve(key)
        if item is None:
            log.debug("Unresolved item name '%s'", name)
            return None
        return item.id

    def require_id(self, name: str) -> int:
        item_id = self.resolve_id(name)
        if item_id is None:
            raise ResolutionError(name)
        return item_id
