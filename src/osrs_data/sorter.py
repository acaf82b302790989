"""
Record sorting for deterministic JSON output.

Exported files are committed and diffed between runs, so every family is
written in a stable order. Sort keys are configured per family as paths
over the exported (camelCase) records: "coordinates.plane" for a nested
field, "outputs[0].itemId" for a field of the first list element.
"""

import re
from typing import Any

FAMILY_SORT_FIELDS: dict[str, list[str]] = {
    "items": ["id"],
    "monsters": ["id", "version"],
    "shops": ["name", "pageId"],
    "sets": ["name", "id"],
    "recipes": ["name", "outputs[0].itemId", "pageId"],
    "spawns": ["itemId", "coordinates.plane", "coordinates.x", "coordinates.y"],
}

_PATH_TOKEN_RE = re.compile(r"([^.\[\]]+)|\[(\d+)\]")


def split_path(path: str) -> list[str | int]:
    """``"outputs[0].itemId"`` -> ``["outputs", 0, "itemId"]``"""
    return [
        int(index) if index else name for name, index in _PATH_TOKEN_RE.findall(path)
    ]


def field_value(record: dict[str, Any], path: str) -> Any:
    value: Any = record
    for token in split_path(path):
        if isinstance(token, int):
            in_range = isinstance(value, list) and token < len(value)
            value = value[token] if in_range else None
        else:
            value = value.get(token) if isinstance(value, dict) else None
        if value is None:
            break
    return value


def _sort_key(record: dict[str, Any], paths: list[str]) -> tuple[tuple[bool, Any], ...]:
    # Missing values sort last and are never compared against real ones
    key = []
    for path in paths:
        value = field_value(record, path)
        if isinstance(value, str):
            value = value.lower()
        key.append((value is None, 0 if value is None else value))
    return tuple(key)


def sort_records(family: str, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    paths = FAMILY_SORT_FIELDS.get(family)
    if not paths:
        raise ValueError(f"No sort order configured for family '{family}'")
    return sorted(records, key=lambda record: _sort_key(record, paths))
