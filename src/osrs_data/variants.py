"""
Multi-variant expansion and value coercion for infobox parameters.

A wiki page can describe several sibling entities at once by suffixing
infobox keys with a number: ``id1``/``id2``, ``name1``/``name2``. Each
family declares a static field table (wiki key -> target attribute + kind);
the unsuffixed keys build a base record (slot 0), and every numeric suffix
gets a copy of that base with its own fields applied on top.

Keys that are not in the table are dropped. Dotted targets such as
``combat_stats.attack`` write into nested dicts.
"""

import copy
import logging
import re
from collections import defaultdict
from collections.abc import Hashable
from typing import Any, Literal, NamedTuple

from osrs_data.templates import clean_markup

log = logging.getLogger(__name__)

FieldKind = Literal["str", "text", "int", "float", "bool", "id", "ids", "list"]

TRUE_VALUES = frozenset({"yes", "true", "1", "immune", "y"})

_NUMBER_RE = re.compile(r"[-+]?\d+(?:\.\d+)?")
_SUFFIX_RE = re.compile(r"^(.*\D)(\d+)$")


class FieldSpec(NamedTuple):
    target: str
    kind: FieldKind = "str"


FieldTable = dict[str, FieldSpec]


def _first_number(value: str) -> float | None:
    match = _NUMBER_RE.search(value.replace(",", ""))
    return float(match.group()) if match else None


def _int_list(value: str) -> list[int]:
    ids = []
    for part in value.split(","):
        part = part.strip()
        if part.isdigit():
            ids.append(int(part))
    return ids


def coerce(value: str | None, kind: FieldKind) -> Any:
    """
    Convert a raw template value. Returns None when the value carries nothing
    usable for that kind, so the caller keeps whatever the record had before.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if kind == "bool":
        return value.lower() in TRUE_VALUES
    if kind == "str":
        return value
    if kind == "text":
        return clean_markup(value)
    if kind == "int":
        number = _first_number(value)
        return int(number) if number is not None else None
    if kind == "float":
        return _first_number(value)
    if kind == "id":
        ids = _int_list(value)
        return ids[0] if ids else None
    if kind == "ids":
        return _int_list(value) or None
    if kind == "list":
        return [part.strip() for part in value.split(",") if part.strip()] or None
    raise ValueError(f"Unknown field kind: {kind}")


def split_variant_key(key: str) -> tuple[str, int | None]:
    """``"id2"`` -> ``("id", 2)``; ``"id"`` -> ``("id", None)``."""
    match = _SUFFIX_RE.match(key)
    if not match:
        return key, None
    return match.group(1), int(match.group(2))


def get_path(record: dict[str, Any], path: str) -> Any:
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def set_path(record: dict[str, Any], path: str, value: Any) -> None:
    *parents, leaf = path.split(".")
    target = record
    for part in parents:
        target = target.setdefault(part, {})
    target[leaf] = value


def _apply(record: dict[str, Any], params: dict[str, str], table: FieldTable) -> None:
    # Table order decides precedence when two wiki keys feed the same target
    for key, spec in table.items():
        if key not in params:
            continue
        value = coerce(params[key], spec.kind)
        if value is not None:
            set_path(record, spec.target, value)


def build_base(params: dict[str, str], table: FieldTable) -> dict[str, Any]:
    record: dict[str, Any] = {}
    _apply(record, params, table)
    return record


def _freeze(value: Any) -> Hashable:
    return tuple(value) if isinstance(value, list) else value


def expand_variants(
    params: dict[str, str], table: FieldTable, id_target: str = "id"
) -> list[dict[str, Any]]:
    """
    Turn one infobox into its candidate records.

    Slot 0 is the base record; each numeric suffix n yields a deep copy of the
    base with the n-suffixed fields applied. Slots without an id are dropped
    and a repeated id keeps the first slot that carried it.
    """
    base = build_base(params, table)

    by_index: dict[int, dict[str, str]] = defaultdict(dict)
    for key, raw in params.items():
        name, index = split_variant_key(key)
        if index is not None and name in table:
            by_index[index][name] = raw

    slots = [base]
    for index in sorted(by_index):
        slot = copy.deepcopy(base)
        _apply(slot, by_index[index], table)
        slots.append(slot)

    records = []
    seen: set[Hashable] = set()
    for slot in slots:
        record_id = get_path(slot, id_target)
        if not record_id:
            continue
        key = _freeze(record_id)
        if key in seen:
            continue
        seen.add(key)
        records.append(slot)

    if len(slots) > 1:
        log.debug("Expanded %d variant slot(s) into %d record(s)", len(slots), len(records))
    return records


def link_siblings(
    records: list[dict[str, Any]], id_field: str = "id", related_field: str = "related_items"
) -> list[dict[str, Any]]:
    ids = [record[id_field] for record in records]
    for record in records:
        record[related_field] = [other for other in ids if other != record[id_field]]
    return records
