"""Outfit stylist agent: recomputes suggestions on every trigger."""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, Dict, Optional

from styleme_app.config import AppConfig
from styleme_app.logging_config import get_logger, log_event, operation_context
from logic.outfit_suggestions import advisory_suggestions, wardrobe_suggestions
from models.outfit import OutfitSuggestion
from models.weather import WeatherReading
from tools.wardrobe_tools import WardrobeTools


LOGGER = get_logger(__name__)


class OutfitStylistAgent:
    """Turns weather, occasion and the wardrobe snapshot into a suggestion.

    Nothing is cached: a change of weather, occasion or wardrobe, or a manual
    refresh, is just another call. The configured simulated latency is waited
    before each recompute so clients can show a loading state.
    """

    def __init__(
        self,
        config: AppConfig,
        wardrobe_tools: WardrobeTools,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.wardrobe_tools = wardrobe_tools
        self._sleep = sleep

    def _user_facing_rationale(self, suggestion: OutfitSuggestion, weather: WeatherReading | None) -> str:
        if suggestion.status != "ok":
            return f"Not enough information for suggestions: {suggestion.reason}."
        occasion = f" for {suggestion.occasion.value}" if suggestion.occasion else ""
        if suggestion.mode == "advisory":
            return f"Ideas{occasion} at {round(weather.temperature)}°C: {', '.join(suggestion.advisories)}."
        names = ", ".join(item.name for item in suggestion.items)
        return f"From your wardrobe{occasion} at {round(weather.temperature)}°C: {names}."

    def suggest(
        self,
        weather: WeatherReading | None,
        occasion: Optional[str] = None,
        use_wardrobe: bool = False,
        seed: Optional[int] = None,
    ) -> Dict[str, object]:
        with operation_context("agent:stylist.suggest") as correlation_id:
            if self.config.suggestion_latency_seconds > 0:
                self._sleep(self.config.suggestion_latency_seconds)

            if use_wardrobe:
                rng = random.Random(seed) if seed is not None else random.Random()
                suggestion = wardrobe_suggestions(weather, self.wardrobe_tools.snapshot(), occasion, rng=rng)
            else:
                suggestion = advisory_suggestions(weather, occasion)

            response: Dict[str, object] = {
                "status": suggestion.status,
                "suggestion": suggestion,
                "user_facing_rationale": self._user_facing_rationale(suggestion, weather),
            }
            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="stylist",
                method="suggest",
                correlation_id=correlation_id,
                mode=suggestion.mode,
                status=suggestion.status,
                result_count=len(suggestion.items) or len(suggestion.advisories),
            )
            return response


__all__ = ["OutfitStylistAgent"]
