"""Weather agent that runs one acquisition and summarises it for display."""

from __future__ import annotations

import logging
from typing import Dict

from styleme_app.config import AppConfig
from styleme_app.logging_config import get_logger, log_event, operation_context
from logic.weather_acquisition import AcquisitionResult, WeatherAcquisition
from models.errors import ProviderError
from models.weather import Provenance, ReportedPosition, WeatherReading
from tools.location_provider import ReportedPositionSensor
from tools.weather_provider import WeatherProvider


LOGGER = get_logger(__name__)

_PROVENANCE_NOTES = {
    Provenance.PRECISE: "from your device location",
    Provenance.APPROXIMATE: "near your network location",
    Provenance.FALLBACK: "for the default city because your location was unavailable",
}


def summarize_reading(reading: WeatherReading) -> str:
    return (
        f"{reading.location_name}: {round(reading.temperature)}°C, {reading.condition.description}. "
        f"Feels {round(reading.feels_like)}°, humidity {round(reading.humidity)}%, "
        f"wind {round(reading.wind_speed)} m/s."
    )


class WeatherAgent:
    """Fetches current weather with location fallbacks."""

    def __init__(self, config: AppConfig, acquisition: WeatherAcquisition, provider: WeatherProvider) -> None:
        self.config = config
        self.acquisition = acquisition
        self.provider = provider

    def _response(self, result: AcquisitionResult) -> Dict[str, object]:
        if result.succeeded and result.reading is not None and result.provenance is not None:
            return {
                "status": "ok",
                "reading": result.reading,
                "provenance": result.provenance.value,
                "user_facing_summary": (
                    f"{summarize_reading(result.reading)} Weather shown {_PROVENANCE_NOTES[result.provenance]}."
                ),
                "debug_summary": result.debug_summary(),
            }
        return {
            "status": "error",
            "retryable": True,
            "message": "Unable to load weather data. Please try again.",
            "debug_summary": result.debug_summary(),
        }

    def get_current_weather(self, position: ReportedPosition | None = None) -> Dict[str, object]:
        """Run a fresh acquisition; calling again is the manual retry."""

        with operation_context("agent:weather.get_current_weather") as correlation_id:
            result = self.acquisition.acquire(ReportedPositionSensor(position))
            response = self._response(result)
            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="weather",
                method="get_current_weather",
                correlation_id=correlation_id,
                status=response["status"],
                provenance=response.get("provenance"),
            )
            return response

    def get_weather_for_city(self, city: str) -> Dict[str, object]:
        """Look up one city directly, without the fallback chain."""

        with operation_context("agent:weather.get_weather_for_city") as correlation_id:
            try:
                reading = self.provider.fetch_weather_by_city(city)
            except ProviderError as exc:
                log_event(
                    LOGGER,
                    level=logging.WARNING,
                    event="agent_call_failed",
                    agent="weather",
                    method="get_weather_for_city",
                    correlation_id=correlation_id,
                    error=str(exc),
                )
                return {
                    "status": "error",
                    "retryable": True,
                    "message": f"Unable to load weather data: {exc}",
                }
            return {
                "status": "ok",
                "reading": reading,
                "provenance": None,
                "user_facing_summary": summarize_reading(reading),
            }


__all__ = ["WeatherAgent", "summarize_reading"]
