"""JSON artifacts: one array of records per family under the output directory."""

import json
import logging
import re
from collections import defaultdict
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from osrs_data.models import FAMILY_MODELS
from osrs_data.sorter import sort_records
from osrs_data.store import PageStore
from osrs_data.templates import normalize_template_name, parse_wikitext, template_params

log = logging.getLogger(__name__)

_PROGRESS_EVERY = 1000


def family_path(output_dir: Path, family: str) -> Path:
    if family not in FAMILY_MODELS:
        raise ValueError(f"Unknown record family '{family}'")
    return output_dir / f"{family}.json"


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")


def write_records(family: str, records: Sequence[BaseModel], output_dir: Path) -> Path:
    path = family_path(output_dir, family)
    data = sort_records(family, [r.model_dump(mode="json", by_alias=True) for r in records])
    _write_json(path, data)
    log.info("Wrote %d %s record(s) to %s", len(data), family, path)
    return path


def load_records(family: str, output_dir: Path) -> list[BaseModel]:
    path = family_path(output_dir, family)
    model = FAMILY_MODELS[family]
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return [model.model_validate(entry) for entry in data]


def template_path(output_dir: Path, template: str) -> Path:
    stem = re.sub(r"[^a-z0-9]", "_", template, flags=re.IGNORECASE).lower()
    return output_dir / f"{stem}.json"


def collect_templates(store: PageStore) -> dict[str, list[dict[str, str]]]:
    """
    Group the parameters of every template on every stored page by template
    name. Each entry carries its name under ``template``; templates called
    without parameters are skipped.
    """
    grouped: dict[str, list[dict[str, str]]] = defaultdict(list)
    for i, page in enumerate(store.iter_pages(), start=1):
        if i % _PROGRESS_EVERY == 0:
            log.info("Templates: %d pages scanned", i)
        if not page.text:
            continue
        for template in parse_wikitext(page.text).filter_templates(recursive=True):
            params = template_params(template)
            name = normalize_template_name(str(template.name))
            if params and name:
                grouped[name].append({**params, "template": name})
    return dict(grouped)


def extract_all_templates(store: PageStore, output_dir: Path) -> dict[str, Path]:
    """Write one JSON array per template name; returns the written file per template."""
    paths = {}
    for name, entries in collect_templates(store).items():
        path = template_path(output_dir, name)
        _write_json(path, entries)
        paths[name] = path
    log.info("Wrote %d template file(s) to %s", len(paths), output_dir)
    return paths
