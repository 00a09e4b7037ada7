"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.calendar_event import CalendarEvent
from models.errors import (
    ConfigurationError,
    LocationUnavailable,
    ProviderError,
    StyleMeError,
    WeatherUnavailable,
)
from models.outfit import OutfitSuggestion
from models.wardrobe_item import WardrobeItem, from_raw_metadata
from models.weather import (
    ConditionKind,
    Coordinate,
    Provenance,
    ReportedPosition,
    ResolvedLocation,
    WeatherCondition,
    WeatherReading,
)

__all__ = [
    "CalendarEvent",
    "ConditionKind",
    "ConfigurationError",
    "Coordinate",
    "LocationUnavailable",
    "OutfitSuggestion",
    "Provenance",
    "ProviderError",
    "ReportedPosition",
    "ResolvedLocation",
    "StyleMeError",
    "WardrobeItem",
    "WeatherCondition",
    "WeatherReading",
    "WeatherUnavailable",
    "from_raw_metadata",
]
