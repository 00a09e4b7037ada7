"""Calendar event schema."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from models.taxonomy import validate_event_type


@dataclass
class CalendarEvent:
    """A planned event that hints at the day's occasion."""

    event_id: str
    title: str
    event_date: date
    event_type: str = "other"
    location: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        self.title = str(self.title).strip()
        if not self.title:
            raise ValueError("title is required")
        if isinstance(self.event_date, str):
            self.event_date = date.fromisoformat(self.event_date)
        self.event_type = validate_event_type(self.event_type)

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "title": self.title,
            "event_date": self.event_date.isoformat(),
            "event_type": self.event_type,
            "location": self.location,
            "description": self.description,
        }


__all__ = ["CalendarEvent"]
