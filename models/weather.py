"""Location and weather value types."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class Provenance(str, Enum):
    """How a location, and therefore a reading, was obtained."""

    PRECISE = "precise"
    APPROXIMATE = "approximate"
    FALLBACK = "fallback"


class ConditionKind(str, Enum):
    """Primary weather classifier shared by all providers."""

    CLEAR = "clear"
    CLOUDS = "clouds"
    MIST = "mist"
    DRIZZLE = "drizzle"
    RAIN = "rain"
    THUNDERSTORM = "thunderstorm"
    SNOW = "snow"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Coordinate:
    """Latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.latitude) and -90.0 <= self.latitude <= 90.0):
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not (math.isfinite(self.longitude) and -180.0 <= self.longitude <= 180.0):
            raise ValueError(f"longitude out of range: {self.longitude}")

    def as_query(self) -> str:
        return f"{self.latitude:.4f},{self.longitude:.4f}"


@dataclass(frozen=True)
class ReportedPosition:
    """A position fix reported by the client's location sensor."""

    coordinate: Coordinate
    captured_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    accuracy_meters: Optional[float] = None
    high_accuracy: bool = True


@dataclass(frozen=True)
class ResolvedLocation:
    coordinate: Coordinate
    provenance: Provenance


@dataclass(frozen=True)
class WeatherCondition:
    kind: ConditionKind
    description: str
    icon: str = ""


@dataclass(frozen=True)
class WeatherReading:
    """Canonical snapshot of current conditions at one place.

    Temperatures are in degrees Celsius and wind speed in metres per second.
    Readings are replaced on refresh, never updated.
    """

    location_name: str
    temperature: float
    feels_like: float
    humidity: float
    temp_min: float
    temp_max: float
    wind_speed: float
    condition: WeatherCondition
    country: Optional[str] = None
    pressure: float = 1013.0
    wind_direction: Optional[str] = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        for name in ("temperature", "feels_like", "temp_min", "temp_max", "pressure"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be a finite number")
        if not 0.0 <= self.humidity <= 100.0:
            raise ValueError(f"humidity must be within [0, 100], got {self.humidity}")
        if not (math.isfinite(self.wind_speed) and self.wind_speed >= 0.0):
            raise ValueError(f"wind_speed must be non-negative, got {self.wind_speed}")

    def to_dict(self) -> dict:
        return {
            "location_name": self.location_name,
            "country": self.country,
            "temperature": self.temperature,
            "feels_like": self.feels_like,
            "humidity": self.humidity,
            "temp_min": self.temp_min,
            "temp_max": self.temp_max,
            "wind_speed": self.wind_speed,
            "wind_direction": self.wind_direction,
            "pressure": self.pressure,
            "condition": {
                "kind": self.condition.kind.value,
                "description": self.condition.description,
                "icon": self.condition.icon,
            },
            "fetched_at": self.fetched_at.isoformat(),
        }


__all__ = [
    "Provenance",
    "ConditionKind",
    "Coordinate",
    "ReportedPosition",
    "ResolvedLocation",
    "WeatherCondition",
    "WeatherReading",
]
