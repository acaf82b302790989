"""
Tests for deterministic record ordering.

Exported files are diffed between runs, so each family must come out in the
same order regardless of page order in the store.
"""

import pytest

from osrs_data import sorter


class TestFieldPaths:
    def test_parse_nested_and_indexed(self):
        assert sorter.split_path("coordinates.plane") == ["coordinates", "plane"]
        assert sorter.split_path("outputs[0].itemId") == ["outputs", 0, "itemId"]

    def test_extract_indexed_value(self):
        record = {"outputs": [{"itemId": 2349}]}

        assert sorter.field_value(record, "outputs[0].itemId") == 2349
        assert sorter.field_value({"outputs": []}, "outputs[0].itemId") is None
        assert sorter.field_value({"outputs": 3}, "outputs[0].itemId") is None


class TestSortRecords:
    def test_items_by_id(self):
        records = [{"id": 1213}, {"id": 526}, {"id": 995}]

        assert [r["id"] for r in sorter.sort_records("items", records)] == [526, 995, 1213]

    def test_monster_versions_after_id(self):
        records = [
            {"id": 3029, "version": "Level 5"},
            {"id": 3029, "version": "Level 2"},
            {"id": 2, "version": None},
        ]

        result = sorter.sort_records("monsters", records)

        assert [(r["id"], r["version"]) for r in result] == [
            (2, None),
            (3029, "Level 2"),
            (3029, "Level 5"),
        ]

    def test_names_case_insensitive(self):
        records = [{"name": "bob's axes", "pageId": 1}, {"name": "Aubury's Rune Shop", "pageId": 2}]

        result = sorter.sort_records("shops", records)

        assert [r["pageId"] for r in result] == [2, 1]

    def test_missing_values_last(self):
        records = [{"name": "Set", "id": None}, {"name": "Set", "id": 12960}]

        result = sorter.sort_records("sets", records)

        assert [r["id"] for r in result] == [12960, None]

    def test_recipes_by_name_then_output(self):
        records = [
            {"name": "Bronze bar", "outputs": [{"itemId": 2350}], "pageId": 1},
            {"name": "Bronze bar", "outputs": [{"itemId": 2349}], "pageId": 2},
            {"name": "Anchovy pizza", "outputs": [], "pageId": 3},
        ]

        result = sorter.sort_records("recipes", records)

        assert [r["pageId"] for r in result] == [3, 2, 1]

    def test_spawns_by_item_then_location(self):
        records = [
            {"itemId": 882, "coordinates": {"x": 3200, "y": 3200, "plane": 1}},
            {"itemId": 882, "coordinates": {"x": 3300, "y": 3100, "plane": 0}},
            {"itemId": 526, "coordinates": {"x": 1, "y": 1, "plane": 3}},
        ]

        result = sorter.sort_records("spawns", records)

        assert [(r["itemId"], r["coordinates"]["x"]) for r in result] == [
            (526, 1),
            (882, 3300),
            (882, 3200),
        ]

    def test_unknown_family(self):
        with pytest.raises(ValueError, match="No sort order"):
            sorter.sort_records("quests", [])
