"""Wardrobe storage, taxonomy and tool tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict

import pytest
from pydantic import ValidationError

sys.path.append(str(Path(__file__).resolve().parents[1]))

from models import taxonomy
from models.wardrobe_item import WardrobeItem, from_raw_metadata
from tools.wardrobe_store import SQLiteWardrobeStore
from tools.wardrobe_tools import WardrobeTools


@pytest.fixture()
def sample_metadata() -> Dict[str, object]:
    return {
        "item_id": "item-1",
        "name": "Navy blazer",
        "category": "jackets",
        "color": "navy",
        "season": "winter",
        "image_url": "https://example.com/blazer.jpg",
        "favorite": "false",
    }


def test_validate_category_canonicalises_and_keeps_extensions() -> None:
    """Known categories are canonicalised, unknown ones are kept verbatim."""

    assert taxonomy.validate_category("tops") == "Tops"
    assert taxonomy.validate_category(" ACCESSORIES ") == "Accessories"
    assert taxonomy.validate_category("Hanbok") == "Hanbok"
    with pytest.raises(ValueError):
        taxonomy.validate_category("  ")


def test_validate_season_defaults_to_all() -> None:
    assert taxonomy.validate_season("") == "All"
    assert taxonomy.validate_season("summer") == "Summer"
    with pytest.raises(ValueError):
        taxonomy.validate_season("monsoon")


def test_from_raw_metadata_normalises_fields(sample_metadata: Dict[str, object]) -> None:
    item = from_raw_metadata(sample_metadata)

    assert item.category == "Jackets"
    assert item.season == "Winter"
    assert item.favorite is False


def test_from_raw_metadata_requires_name_and_category() -> None:
    with pytest.raises(ValueError, match="name"):
        from_raw_metadata({"item_id": "x", "category": "Tops"})


@pytest.fixture()
def store(tmp_path: Path) -> SQLiteWardrobeStore:
    return SQLiteWardrobeStore(tmp_path / "wardrobe.db")


def test_store_creates_table_and_round_trip(store: SQLiteWardrobeStore, sample_metadata: Dict[str, object]) -> None:
    """Creating and retrieving an item round-trips through SQLite."""

    item = from_raw_metadata(sample_metadata)
    store.create_item(item)

    assert store.get_item("item-1") == item
    assert store.list_items() == [item]
    assert store.get_item("missing") is None


def test_store_lists_in_insertion_order_and_filters(store: SQLiteWardrobeStore) -> None:
    shirt = WardrobeItem(item_id="b", name="Shirt", category="Tops")
    jeans = WardrobeItem(item_id="a", name="Jeans", category="Pants")
    tee = WardrobeItem(item_id="c", name="Tee", category="Tops")
    for item in (shirt, jeans, tee):
        store.create_item(item)

    assert [item.item_id for item in store.list_items()] == ["b", "a", "c"]
    assert store.list_items("tops") == [shirt, tee]
    assert store.list_items("All") == [shirt, jeans, tee]


def test_replacing_an_item_keeps_its_position(store: SQLiteWardrobeStore) -> None:
    store.create_item(WardrobeItem(item_id="a", name="Shirt", category="Tops"))
    store.create_item(WardrobeItem(item_id="b", name="Jeans", category="Pants"))
    store.create_item(WardrobeItem(item_id="a", name="Linen shirt", category="Tops"))

    items = store.list_items()
    assert [item.item_id for item in items] == ["a", "b"]
    assert items[0].name == "Linen shirt"


def test_toggle_favorite_flips_flag(store: SQLiteWardrobeStore, sample_metadata: Dict[str, object]) -> None:
    store.create_item(from_raw_metadata(sample_metadata))

    assert store.toggle_favorite("item-1").favorite is True
    assert store.toggle_favorite("item-1").favorite is False
    assert store.toggle_favorite("missing") is None


def test_wardrobe_tools_round_trip(tmp_path: Path, sample_metadata: Dict[str, object]) -> None:
    """Wardrobe tools wrap store operations for agents and routes."""

    tools = WardrobeTools(SQLiteWardrobeStore(tmp_path / "tools.db"))

    added = tools.add_wardrobe_item(item_data=sample_metadata)
    generated = tools.add_wardrobe_item(item_data={"name": "White tee", "category": "Tops"})

    assert added["item_id"] == "item-1"
    assert generated["item_id"]
    assert tools.get_wardrobe_item("item-1")["category"] == "Jackets"
    assert len(tools.list_wardrobe_items()) == 2
    assert [entry["name"] for entry in tools.list_wardrobe_items(category="Tops")] == ["White tee"]
    assert tools.toggle_favorite("item-1")["favorite"] is True
    assert [item.item_id for item in tools.snapshot()] == ["item-1", generated["item_id"]]


def test_wardrobe_tools_validate_input(tmp_path: Path) -> None:
    tools = WardrobeTools(SQLiteWardrobeStore(tmp_path / "tools.db"))

    with pytest.raises(ValidationError):
        tools.add_wardrobe_item(item_data={"name": "", "category": "Tops"})
