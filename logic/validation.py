"""Pydantic schemas for validating HTTP payloads."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from models.weather import Coordinate, ReportedPosition


class PositionPayload(BaseModel):
    """A location-sensor fix captured by the client."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    accuracy_meters: Optional[float] = Field(default=None, ge=0)
    captured_at: Optional[datetime] = None
    high_accuracy: bool = True

    def to_position(self) -> ReportedPosition:
        captured_at = self.captured_at or datetime.now(timezone.utc)
        return ReportedPosition(
            coordinate=Coordinate(latitude=self.latitude, longitude=self.longitude),
            captured_at=captured_at,
            accuracy_meters=self.accuracy_meters,
            high_accuracy=self.high_accuracy,
        )


class WeatherRequest(BaseModel):
    position: Optional[PositionPayload] = None


class SuggestionRequest(BaseModel):
    """Inputs for one suggestion recompute."""

    position: Optional[PositionPayload] = None
    city: Optional[str] = Field(default=None, min_length=1)
    occasion: Optional[str] = None
    target_date: Optional[date] = None
    use_wardrobe: bool = False
    seed: Optional[int] = None

    @field_validator("city")
    @classmethod
    def _strip_city(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("city must not be blank")
        return value


class WardrobeItemCreate(BaseModel):
    item_id: Optional[str] = None
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    color: str = ""
    season: str = ""
    image_url: str = ""
    favorite: bool = False


class CalendarEventCreate(BaseModel):
    event_id: Optional[str] = None
    title: str = Field(min_length=1)
    event_date: date
    event_type: Literal["work", "casual", "formal", "party", "sport", "other"] = "other"
    location: Optional[str] = None
    description: Optional[str] = None


class ErrorResponse(BaseModel):
    message: str
    retryable: bool
    details: List[Dict[str, Any]] = []


__all__ = [
    "PositionPayload",
    "WeatherRequest",
    "SuggestionRequest",
    "WardrobeItemCreate",
    "CalendarEventCreate",
    "ErrorResponse",
]
