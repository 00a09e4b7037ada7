"""Wardrobe item data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from models.taxonomy import validate_category, validate_season


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass
class WardrobeItem:
    """Represents one catalogued clothing item."""

    item_id: str
    name: str
    category: str
    color: str = ""
    season: str = "All"
    image_url: str = ""
    favorite: bool = False

    def __post_init__(self) -> None:
        self.item_id = str(self.item_id).strip()
        if not self.item_id:
            raise ValueError("item_id is required")
        self.name = str(self.name).strip()
        if not self.name:
            raise ValueError("name is required")
        self.category = validate_category(self.category)
        self.season = validate_season(self.season)
        self.color = str(self.color or "").strip()
        self.image_url = str(self.image_url or "").strip()
        self.favorite = _as_bool(self.favorite)


def from_raw_metadata(metadata: Dict[str, Any]) -> WardrobeItem:
    """Factory to build a :class:`WardrobeItem` from loose form data."""

    required_fields = ["item_id", "name", "category"]
    missing = [field for field in required_fields if not metadata.get(field)]
    if missing:
        raise ValueError(f"Missing required fields for WardrobeItem: {missing}")

    return WardrobeItem(
        item_id=str(metadata["item_id"]),
        name=str(metadata["name"]),
        category=str(metadata["category"]),
        color=str(metadata.get("color") or ""),
        season=str(metadata.get("season") or ""),
        image_url=str(metadata.get("image_url") or metadata.get("image") or ""),
        favorite=metadata.get("favorite", False),
    )


__all__ = ["WardrobeItem", "from_raw_metadata"]
