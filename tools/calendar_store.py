"""Calendar event storage: interface, SQLite implementation and an in-memory double."""

from __future__ import annotations

import logging
import sqlite3
from datetime import date
from pathlib import Path
from typing import List

from models.calendar_event import CalendarEvent


LOGGER = logging.getLogger(__name__)


class CalendarStore:
    """Persistence interface for calendar events."""

    def add_event(self, event: CalendarEvent) -> CalendarEvent:
        raise NotImplementedError

    def list_events(self, start_date: date, end_date: date | None = None) -> List[CalendarEvent]:
        """Events in the inclusive date range, ordered by date then insertion."""

        raise NotImplementedError

    def delete_event(self, event_id: str) -> bool:
        raise NotImplementedError


class SQLiteCalendarStore(CalendarStore):
    """Local SQLite-backed calendar."""

    def __init__(self, database_path: str | Path = "data/calendar.db") -> None:
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
                CREATE TABLE IF NOT EXISTS calendar_events (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    event_id TEXT NOT NULL UNIQUE,
                    title TEXT NOT NULL,
                    event_date TEXT NOT NULL,
                    event_type TEXT NOT NULL,
                    location TEXT,
                    description TEXT
                );
                """
            )

    def add_event(self, event: CalendarEvent) -> CalendarEvent:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO calendar_events (event_id, title, event_date, event_type, location, description)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        event.event_id,
                        event.title,
                        event.event_date.isoformat(),
                        event.event_type,
                        event.location,
                        event.description,
                    ),
                )
        except sqlite3.IntegrityError as exc:
            raise ValueError(f"calendar event '{event.event_id}' already exists") from exc
        LOGGER.info("Stored calendar event", extra={"event_type": event.event_type})
        return event

    def _row_to_event(self, row: sqlite3.Row) -> CalendarEvent:
        return CalendarEvent(
            event_id=row["event_id"],
            title=row["title"],
            event_date=date.fromisoformat(row["event_date"]),
            event_type=row["event_type"],
            location=row["location"],
            description=row["description"],
        )

    def list_events(self, start_date: date, end_date: date | None = None) -> List[CalendarEvent]:
        end = end_date or start_date
        if start_date > end:
            raise ValueError("start_date must be on or before end_date")
        with self._connect() as conn:
            cursor = conn.execute(
                """
                SELECT * FROM calendar_events
                WHERE event_date BETWEEN ? AND ?
                ORDER BY event_date, seq
                """,
                (start_date.isoformat(), end.isoformat()),
            )
            return [self._row_to_event(row) for row in cursor.fetchall()]

    def delete_event(self, event_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM calendar_events WHERE event_id = ?", (event_id,))
            return cursor.rowcount > 0


class InMemoryCalendarStore(CalendarStore):
    """Offline deterministic calendar for tests."""

    def __init__(self, events: List[CalendarEvent] | None = None) -> None:
        self._events: List[CalendarEvent] = list(events or [])

    def add_event(self, event: CalendarEvent) -> CalendarEvent:
        self._events.append(event)
        return event

    def list_events(self, start_date: date, end_date: date | None = None) -> List[CalendarEvent]:
        end = end_date or start_date
        if start_date > end:
            raise ValueError("start_date must be on or before end_date")
        matches = [event for event in self._events if start_date <= event.event_date <= end]
        return sorted(matches, key=lambda event: event.event_date)

    def delete_event(self, event_id: str) -> bool:
        before = len(self._events)
        self._events = [event for event in self._events if event.event_id != event_id]
        return len(self._events) < before


__all__ = ["CalendarStore", "SQLiteCalendarStore", "InMemoryCalendarStore"]
