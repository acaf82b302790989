"""Tests for JSON artifact writing."""

import json
from pathlib import Path

import pytest

from osrs_data.export import (
    collect_templates,
    extract_all_templates,
    family_path,
    load_records,
    template_path,
    write_records,
)
from osrs_data.models import Item, ItemSpawn, SpawnCoordinates
from osrs_data.store import PageStore
from osrs_data.types import DumpPage


def test_family_path(tmp_path: Path):
    assert family_path(tmp_path, "items") == tmp_path / "items.json"
    with pytest.raises(ValueError, match="Unknown record family"):
        family_path(tmp_path, "quests")


def test_write_sorted_camel_case_array(tmp_path: Path):
    items = [Item(id=1213, name="Torch", is_tradeable=True), Item(id=526, name="Bones")]

    path = write_records("items", items, tmp_path / "out")

    text = path.read_text(encoding="utf-8")
    data = json.loads(text)
    assert [entry["id"] for entry in data] == [526, 1213]
    assert data[1]["isTradeable"] is True
    assert data[1]["relatedItems"] == []
    assert "is_tradeable" not in data[1]
    assert text.endswith("]\n")


def test_write_empty_family(tmp_path: Path):
    path = write_records("sets", [], tmp_path)

    assert json.loads(path.read_text(encoding="utf-8")) == []


def test_load_records_roundtrip(tmp_path: Path):
    spawn = ItemSpawn(
        item_id=882,
        item_name="Bronze arrow",
        coordinates=SpawnCoordinates(x=3200, y=3201, plane=1),
        quantity=5,
    )
    write_records("spawns", [spawn], tmp_path)

    assert load_records("spawns", tmp_path) == [spawn]


@pytest.fixture
def store():
    with PageStore(":memory:") as page_store:
        page_store.upsert_dump_pages(
            [
                DumpPage(
                    1213,
                    "Torch",
                    0,
                    1,
                    None,
                    None,
                    "wikitext",
                    "{{Infobox Item|name=Torch|id=1213}}\n{{Clear}}\n"
                    "{{ItemSpawnLine|name=Torch|3200,3200}}",
                ),
                DumpPage(526, "Bones", 0, 1, None, None, "wikitext", "{{infobox_item|name=Bones}}"),
                DumpPage(2, "Empty", 0, 1, None, None, "wikitext", ""),
            ]
        )
        yield page_store


def test_collect_templates_groups_by_name(store: PageStore):
    grouped = collect_templates(store)

    assert set(grouped) == {"infobox item", "itemspawnline"}
    assert grouped["infobox item"] == [
        {"name": "Bones", "template": "infobox item"},
        {"name": "Torch", "id": "1213", "template": "infobox item"},
    ]
    assert grouped["itemspawnline"] == [
        {"name": "Torch", "1": "3200,3200", "template": "itemspawnline"}
    ]


def test_extract_all_templates_writes_file_per_template(store: PageStore, tmp_path: Path):
    paths = extract_all_templates(store, tmp_path / "templates")

    assert paths["infobox item"] == tmp_path / "templates" / "infobox_item.json"
    data = json.loads(paths["infobox item"].read_text(encoding="utf-8"))
    assert [entry["name"] for entry in data] == ["Bones", "Torch"]
    assert sorted(p.name for p in (tmp_path / "templates").iterdir()) == [
        "infobox_item.json",
        "itemspawnline.json",
    ]


def test_template_path_replaces_punctuation(tmp_path: Path):
    assert template_path(tmp_path, "infobox bonuses/2") == tmp_path / "infobox_bonuses_2.json"
