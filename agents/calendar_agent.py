"""Calendar agent that manages events and derives the day's occasion."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from styleme_app.logging_config import get_logger, log_event, operation_context
from models.calendar_event import CalendarEvent
from models.taxonomy import EVENT_TYPE_OCCASIONS
from tools.calendar_store import CalendarStore
from tools.observability import instrument_tool

LOGGER = get_logger(__name__)


class CalendarAgent:
    """Thin service over the calendar store."""

    def __init__(self, store: CalendarStore) -> None:
        self.store = store

    @instrument_tool("add_calendar_event")
    def add_event(self, event_data: Dict[str, Any]) -> CalendarEvent:
        event = CalendarEvent(
            event_id=str(event_data.get("event_id") or uuid.uuid4().hex),
            title=str(event_data.get("title") or ""),
            event_date=event_data["event_date"],
            event_type=event_data.get("event_type") or "other",
            location=event_data.get("location"),
            description=event_data.get("description"),
        )
        return self.store.add_event(event)

    def list_events(self, start_date: date, end_date: date | None = None) -> List[CalendarEvent]:
        return self.store.list_events(start_date, end_date)

    def delete_event(self, event_id: str) -> bool:
        return self.store.delete_event(event_id)

    def occasion_for_date(self, target_date: date) -> Optional[str]:
        """Occasion label from the first typed event of the day, if any."""

        with operation_context("agent:calendar.occasion_for_date") as correlation_id:
            events = self.store.list_events(target_date)
            occasion = None
            for event in events:
                occasion = EVENT_TYPE_OCCASIONS.get(event.event_type)
                if occasion:
                    break
            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="calendar",
                method="occasion_for_date",
                correlation_id=correlation_id,
                event_count=len(events),
                occasion=occasion,
            )
            return occasion


__all__ = ["CalendarAgent"]
