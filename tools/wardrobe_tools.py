"""Instrumented, dictionary-facing wrapper around the wardrobe store."""

from __future__ import annotations

import uuid
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from logic.validation import WardrobeItemCreate
from models.wardrobe_item import WardrobeItem, from_raw_metadata
from tools.observability import instrument_tool
from tools.wardrobe_store import SQLiteWardrobeStore, WardrobeStore


class _AddWardrobeItemInput(BaseModel):
    item_data: WardrobeItemCreate


def _default_store() -> SQLiteWardrobeStore:
    return SQLiteWardrobeStore()


class WardrobeTools:
    """Thin wrapper exposing WardrobeStore operations to agents and routes."""

    def __init__(self, store: Optional[WardrobeStore] = None) -> None:
        self.store = store or _default_store()

    @instrument_tool("add_wardrobe_item", input_model=_AddWardrobeItemInput)
    def add_wardrobe_item(self, *, item_data: Dict[str, Any]) -> Dict[str, Any]:
        payload = {**item_data, "item_id": item_data.get("item_id") or uuid.uuid4().hex}
        stored = self.store.create_item(from_raw_metadata(payload))
        return asdict(stored)

    @instrument_tool("get_wardrobe_item")
    def get_wardrobe_item(self, item_id: str) -> Optional[Dict[str, Any]]:
        item = self.store.get_item(item_id)
        return asdict(item) if item else None

    @instrument_tool("list_wardrobe_items")
    def list_wardrobe_items(self, category: str | None = None) -> List[Dict[str, Any]]:
        return [asdict(item) for item in self.store.list_items(category)]

    @instrument_tool("toggle_favorite")
    def toggle_favorite(self, item_id: str) -> Optional[Dict[str, Any]]:
        item = self.store.toggle_favorite(item_id)
        return asdict(item) if item else None

    def snapshot(self) -> List[WardrobeItem]:
        """Current wardrobe as value objects for the suggestion engine."""

        return self.store.list_items()


__all__ = ["WardrobeTools"]
