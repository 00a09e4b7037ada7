"""Wardrobe storage abstractions and SQLite implementation."""
from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import List, Optional

from models.taxonomy import validate_category
from models.wardrobe_item import WardrobeItem


class WardrobeStore:
    """Persistence interface for wardrobe items."""

    def create_item(self, item: WardrobeItem) -> WardrobeItem:
        raise NotImplementedError

    def get_item(self, item_id: str) -> Optional[WardrobeItem]:
        raise NotImplementedError

    def list_items(self, category: str | None = None) -> List[WardrobeItem]:
        raise NotImplementedError

    def toggle_favorite(self, item_id: str) -> Optional[WardrobeItem]:
        raise NotImplementedError


class SQLiteWardrobeStore(WardrobeStore):
    """Local SQLite-backed store for wardrobe items."""

    def __init__(self, database_path: str | Path = "data/wardrobe.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS wardrobe_items (
                    item_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    image_url TEXT,
                    category TEXT NOT NULL,
                    color TEXT,
                    season TEXT,
                    favorite INTEGER NOT NULL DEFAULT 0,
                    created_seq INTEGER
                );
                """
            )

    def create_item(self, item: WardrobeItem) -> WardrobeItem:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO wardrobe_items (
                    item_id, name, image_url, category, color, season, favorite, created_seq
                ) VALUES (
                    ?, ?, ?, ?, ?, ?, ?,
                    COALESCE(
                        (SELECT created_seq FROM wardrobe_items WHERE item_id = ?),
                        (SELECT COALESCE(MAX(created_seq), 0) + 1 FROM wardrobe_items)
                    )
                )
                """,
                (
                    item.item_id,
                    item.name,
                    item.image_url,
                    item.category,
                    item.color,
                    item.season,
                    int(item.favorite),
                    item.item_id,
                ),
            )
        return item

    def _row_to_item(self, row: sqlite3.Row) -> WardrobeItem:
        return WardrobeItem(
            item_id=row["item_id"],
            name=row["name"],
            image_url=row["image_url"] or "",
            category=row["category"],
            color=row["color"] or "",
            season=row["season"] or "",
            favorite=bool(row["favorite"]),
        )

    def get_item(self, item_id: str) -> Optional[WardrobeItem]:
        with self._connect() as conn:
            cursor = conn.execute("SELECT * FROM wardrobe_items WHERE item_id = ?", (item_id,))
            row = cursor.fetchone()
            return self._row_to_item(row) if row else None

    def list_items(self, category: str | None = None) -> List[WardrobeItem]:
        """Return items in insertion order, optionally for one category."""

        with self._connect() as conn:
            if category and category.strip().lower() != "all":
                cursor = conn.execute(
                    "SELECT * FROM wardrobe_items WHERE category = ? ORDER BY created_seq",
                    (validate_category(category),),
                )
            else:
                cursor = conn.execute("SELECT * FROM wardrobe_items ORDER BY created_seq")
            return [self._row_to_item(row) for row in cursor.fetchall()]

    def toggle_favorite(self, item_id: str) -> Optional[WardrobeItem]:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE wardrobe_items SET favorite = 1 - favorite WHERE item_id = ?",
                (item_id,),
            )
            if cursor.rowcount == 0:
                return None
        return self.get_item(item_id)


__all__ = ["WardrobeStore", "SQLiteWardrobeStore"]
