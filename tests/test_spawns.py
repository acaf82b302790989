"""Tests for item spawn extraction."""

import pytest

from osrs_data.config import Settings
from osrs_data.extractors.spawns import SpawnExtractor, parse_coordinate
from osrs_data.models import Item, Page
from osrs_data.resolver import EntityResolver


@pytest.fixture
def extractor() -> SpawnExtractor:
    items = [Item(id=882, name="Bronze arrow"), Item(id=1925, name="Bucket")]
    return SpawnExtractor(EntityResolver(items, settings=Settings(_env_file=None)))


class TestParseCoordinate:
    def test_plain(self):
        coordinates, quantity = parse_coordinate("3200,3201")

        assert (coordinates.x, coordinates.y, coordinates.plane, quantity) == (3200, 3201, 0, 1)

    def test_positional_plane(self):
        coordinates, _ = parse_coordinate("3200, 3201, 1")

        assert coordinates.plane == 1

    def test_named_plane_and_quantity(self):
        coordinates, quantity = parse_coordinate("3200,3201,plane:2,qty:5")

        assert (coordinates.plane, quantity) == (2, 5)

    def test_invalid(self):
        assert parse_coordinate("north") is None
        assert parse_coordinate("3200") is None


def test_location_page_resolves_line_names(extractor: SpawnExtractor):
    text = (
        "{{ItemSpawnTableHead}}\n"
        "{{ItemSpawnLine|name=Bucket|location=[[Lumbridge]]|members=No|3225,3212|3226,3213,1}}\n"
        "{{ItemSpawnLine|name=Goblin skull|location=Lumbridge|3000,3000}}\n"
    )

    spawns = extractor(Page(id=600, title="Lumbridge", text=text))

    assert [(s.item_id, s.coordinates.x, s.coordinates.plane) for s in spawns] == [
        (1925, 3225, 0),
        (1925, 3226, 1),
    ]
    assert spawns[0].location == "Lumbridge"
    assert spawns[0].members is False
    assert spawns[0].page_id == 600


def test_item_page_owns_its_spawns(extractor: SpawnExtractor):
    text = (
        "{{Infobox Item|name=Bronze arrow|id=882}}\n"
        "{{ItemSpawnLine|name=Bronze arrows|location=Varrock|members=Yes|3200,3200,qty:5}}\n"
    )

    [spawn] = extractor(Page(id=601, title="Bronze arrow", text=text))

    assert spawn.item_id == 882
    assert spawn.item_name == "Bronze arrows"
    assert spawn.quantity == 5
    assert spawn.members is True


def test_variant_owner_matched_by_name(extractor: SpawnExtractor):
    text = (
        "{{Infobox Item|name1=Logs|id1=1511|name2=Oak logs|id2=1521}}\n"
        "{{ItemSpawnLine|name=Oak logs|location=Draynor|3100,3200}}\n"
        "{{ItemSpawnLine|name=Something else|location=Draynor|3101,3201}}\n"
    )

    spawns = extractor(Page(id=602, title="Logs", text=text))

    assert [s.item_id for s in spawns] == [1521, 1511]


def test_other_item_on_variant_page_resolved(extractor: SpawnExtractor):
    text = (
        "{{Infobox Item|name1=Logs|id1=1511|name2=Oak logs|id2=1521}}\n"
        "{{ItemSpawnLine|name=Bucket|location=Draynor|3102,3202}}\n"
    )

    spawns = extractor(Page(id=602, title="Logs", text=text))

    assert [(s.item_id, s.item_name) for s in spawns] == [(1925, "Bucket")]


def test_page_without_spawn_lines(extractor: SpawnExtractor):
    assert extractor(Page(id=603, title="Bucket", text="{{Infobox Item|id=1925}}")) is None
