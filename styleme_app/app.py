"""StyleMe app bootstrap."""

from __future__ import annotations

import logging
from datetime import date as dt_date
from typing import Dict, Optional

from styleme_app.config import AppConfig
from styleme_app.logging_config import configure_logging, get_logger, log_event, operation_context
from agents.calendar_agent import CalendarAgent
from agents.outfit_stylist_agent import OutfitStylistAgent
from agents.weather_agent import WeatherAgent
from logic.weather_acquisition import WeatherAcquisition
from models.weather import ReportedPosition
from tools.calendar_store import CalendarStore, SQLiteCalendarStore
from tools.location_provider import IpGeolocationClient, LocationResolver
from tools.wardrobe_store import SQLiteWardrobeStore, WardrobeStore
from tools.wardrobe_tools import WardrobeTools
from tools.weather_provider import WeatherProvider, build_weather_provider


LOGGER = get_logger(__name__)


class StyleMeApp:
    """Wires together providers, stores and agents."""

    def __init__(
        self,
        config: AppConfig | None = None,
        weather_provider: WeatherProvider | None = None,
        ip_client: IpGeolocationClient | None = None,
        wardrobe_store: WardrobeStore | None = None,
        calendar_store: CalendarStore | None = None,
    ) -> None:
        self.config = config or AppConfig.from_env()
        configure_logging(self.config.log_level)

        self.weather_provider = weather_provider or build_weather_provider(
            self.config.weather_provider,
            api_key=self.config.weather_api_key,
            timeout_seconds=self.config.http_timeout_seconds,
        )
        self.ip_client = ip_client or IpGeolocationClient(
            url=self.config.ip_geolocation_url, timeout_seconds=self.config.http_timeout_seconds
        )
        self.location_resolver = LocationResolver(
            ip_client=self.ip_client,
            timeout_seconds=self.config.location_timeout_seconds,
            maximum_age_seconds=self.config.location_max_age_seconds,
        )
        self.acquisition = WeatherAcquisition(
            resolver=self.location_resolver,
            provider=self.weather_provider,
            fallback_city=self.config.fallback_city,
        )
        self.wardrobe_store = wardrobe_store or SQLiteWardrobeStore(self.config.wardrobe_db_path)
        self.calendar_store = calendar_store or SQLiteCalendarStore(self.config.calendar_db_path)
        self.wardrobe_tools = WardrobeTools(self.wardrobe_store)

        self.weather_agent = WeatherAgent(
            config=self.config, acquisition=self.acquisition, provider=self.weather_provider
        )
        self.outfit_stylist = OutfitStylistAgent(config=self.config, wardrobe_tools=self.wardrobe_tools)
        self.calendar_agent = CalendarAgent(store=self.calendar_store)

    def plan_outfit(
        self,
        *,
        position: ReportedPosition | None = None,
        city: str | None = None,
        occasion: str | None = None,
        target_date: dt_date | None = None,
        use_wardrobe: bool = False,
        seed: int | None = None,
    ) -> Dict[str, object]:
        """Weather first, then suggestions.

        A missing occasion is taken from the calendar for ``target_date``
        (today by default). When weather cannot be obtained the stylist still
        runs and reports insufficient data, and the weather error is returned
        alongside so clients can offer a retry.
        """

        with operation_context("app:plan_outfit") as correlation_id:
            if city:
                weather_response = self.weather_agent.get_weather_for_city(city)
            else:
                weather_response = self.weather_agent.get_current_weather(position)
            reading = weather_response.get("reading") if weather_response["status"] == "ok" else None

            resolved_occasion: Optional[str] = occasion
            if not resolved_occasion:
                resolved_occasion = self.calendar_agent.occasion_for_date(target_date or dt_date.today())

            stylist_response = self.outfit_stylist.suggest(
                reading, occasion=resolved_occasion, use_wardrobe=use_wardrobe, seed=seed
            )
            log_event(
                LOGGER,
                level=logging.INFO,
                event="app_call_completed",
                agent="app",
                method="plan_outfit",
                correlation_id=correlation_id,
                weather_status=weather_response["status"],
                suggestion_status=stylist_response["status"],
            )
            return {
                "status": "ok" if reading is not None else "error",
                "weather": weather_response,
                "occasion": resolved_occasion,
                "suggestion": stylist_response["suggestion"],
                "user_facing_rationale": stylist_response["user_facing_rationale"],
            }


__all__ = ["StyleMeApp"]
