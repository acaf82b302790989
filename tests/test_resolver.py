"""Tests for name to item resolution."""

from pathlib import Path

import pytest

from osrs_data.config import Settings
from osrs_data.exceptions import ConfigurationError, ResolutionError
from osrs_data.models import Item
from osrs_data.resolver import (
    EntityResolver,
    clean_name,
    file_name_from_image,
    load_name_overrides,
)


def _item(item_id: int, name: str, **kwargs) -> Item:
    return Item(id=item_id, name=name, **kwargs)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def items() -> list[Item]:
    return [
        _item(1213, "Torch", is_tradeable=True, image="[[File:Torch.png]]"),
        _item(9999, "Torch", is_in_main_game=False, is_tradeable=True),
        _item(
            1712,
            "Amulet of glory(4)",
            aliases=["Amulet of glory (4", "Glory"],
            is_tradeable=True,
            is_on_exchange=True,
        ),
        _item(526, "Bones", image="File:Bones_pile.png|link=Bones"),
    ]


@pytest.fixture
def resolver(items: list[Item], settings: Settings) -> EntityResolver:
    return EntityResolver(items, settings=settings).build()


class TestHelpers:
    def test_clean_name(self):
        assert clean_name("  Amulet \n of   glory ") == "Amulet of glory"

    @pytest.mark.parametrize(
        "image,expected",
        [
            ("[[File:Torch (lit).png]]", "Torch (lit)"),
            ("File:Bronze_arrow 5.png|link=x", "Bronze arrow 5"),
            ("Image:Coins 10000.gif", "Coins 10000"),
            ("", None),
            (None, None),
        ],
    )
    def test_file_name_from_image(self, image, expected):
        assert file_name_from_image(image) == expected


class TestWeights:
    def test_main_game_tradeable_scores_highest(self, resolver: EntityResolver, items):
        assert resolver.weight(items[0]) == 4
        assert resolver.weight(items[1]) == 1

    def test_heavier_item_wins_name_collision(self, resolver: EntityResolver):
        assert resolver.get_by_name("Torch").id == 1213

    def test_heavier_item_wins_regardless_of_order(self, items, settings):
        resolver = EntityResolver(reversed(items), settings=settings)

        assert resolver.get_by_name("Torch").id == 1213

    def test_equal_weight_keeps_first(self, settings):
        resolver = EntityResolver([_item(1, "Rock"), _item(2, "Rock")], settings=settings)

        assert resolver.get_by_name("Rock").id == 1

    def test_weights_come_from_settings(self, items):
        settings = Settings(_env_file=None, weight_main_game=0, weight_exchange=0)
        resolver = EntityResolver(items, settings=settings)

        assert resolver.weight(items[0]) == 1
        assert resolver.get_by_name("Torch").id == 1213


class TestIndices:
    def test_name_lookup_ignores_case_of_first_letter_and_underscores(self, resolver):
        assert resolver.get_by_name("bones").id == 526
        assert resolver.get_by_name("Amulet_of_glory(4)").id == 1712

    def test_unbalanced_alias_repaired(self, resolver: EntityResolver):
        assert resolver.get_by_alias("Amulet of glory (4").id == 1712
        assert resolver.get_by_alias("Amulet of glory (4)").id == 1712

    def test_file_name_index(self, resolver: EntityResolver):
        assert resolver.get_by_file_name("Bones pile").id == 526

    def test_indices_read_only(self, resolver: EntityResolver):
        with pytest.raises(TypeError):
            resolver.names["Torch"] = None

    def test_build_is_idempotent(self, resolver: EntityResolver):
        assert resolver.build() is resolver
        assert len(resolver.names) == 3


class TestResolve:
    def test_order_name_alias_file(self, resolver: EntityResolver):
        assert resolver.resolve("Torch").id == 1213
        assert resolver.resolve("Glory").id == 1712
        assert resolver.resolve("Bones pile").id == 526
        assert resolver.resolve("Nothing") is None
        assert resolver.resolve("") is None

    def test_name_beats_alias(self, settings):
        items = [_item(1, "Glory", is_tradeable=True), _item(2, "Amulet", aliases=["Glory"])]

        assert EntityResolver(items, settings=settings).resolve("Glory").id == 1

    def test_overrides_take_priority(self, items, settings):
        resolver = EntityResolver(items, overrides={"torch": 9999}, settings=settings)

        assert resolver.resolve("Torch").id == 9999
        assert resolver.resolve_id("Torch") == 9999

    def test_override_to_unknown_id(self, items, settings):
        resolver = EntityResolver(items, overrides={"Mystery box": 6199}, settings=settings)

        assert resolver.resolve_id("Mystery box") == 6199

    def test_require_id(self, resolver: EntityResolver):
        assert resolver.require_id("Bones") == 526
        with pytest.raises(ResolutionError, match="No item matches 'Nothing'"):
            resolver.require_id("Nothing")


class TestOverridesFile:
    def test_missing_file_means_no_overrides(self, tmp_path: Path):
        assert load_name_overrides(tmp_path / "missing.yaml") == {}

    def test_keys_normalized(self, tmp_path: Path):
        path = tmp_path / "overrides.yaml"
        path.write_text("coins_10000: 995\nbones: '526'\n", encoding="utf-8")

        assert load_name_overrides(path) == {"Coins 10000": 995, "Bones": 526}

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "overrides.yaml"
        path.write_text("bones: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_name_overrides(path)
