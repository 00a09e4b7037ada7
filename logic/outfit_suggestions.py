"""Rule-based outfit suggestions with transparent diagnostics.

Two modes share one occasion keyword table:

* advisory mode turns a weather reading (and optional occasion) into a short,
  deduplicated list of clothing hints;
* wardrobe mode narrows the user's wardrobe by temperature band and occasion,
  then draws at most one item per category.

Neither mode raises on missing input: no weather or an empty wardrobe yields an
``insufficient_data`` suggestion.
"""
from __future__ import annotations

import logging
import random
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from models.outfit import OutfitSuggestion
from models.taxonomy import CATEGORIES, OccasionKind, match_occasion
from models.wardrobe_item import WardrobeItem
from models.weather import WeatherReading

logger = logging.getLogger(__name__)

MAX_ADVISORY_ITEMS = 8
MAX_WARDROBE_ITEMS = 6

# Strict upper bounds in ascending order; the first match wins.
TEMPERATURE_BANDS: Sequence[Tuple[float, str, List[str]]] = (
    (0.0, "heavy_winter", ["Heavy winter coat", "Warm boots", "Gloves", "Scarf", "Thermal layers"]),
    (10.0, "warm_jacket", ["Warm jacket", "Long pants", "Closed shoes", "Light sweater"]),
    (15.0, "light_jacket", ["Light jacket", "Jeans", "Sneakers", "Long sleeve shirt"]),
    (25.0, "light_layer", ["Light cardigan", "Jeans or light pants", "Comfortable shoes"]),
)
WARM_WEATHER_BAND: Tuple[str, List[str]] = (
    "warm_weather",
    ["Light shirt", "Shorts or light pants", "Sandals", "Sun hat"],
)

# Checked in order against the primary condition tag; the first match wins.
CONDITION_OVERLAYS: Sequence[Tuple[Tuple[str, ...], List[str]]] = (
    (("rain",), ["Umbrella", "Waterproof jacket", "Water-resistant shoes"]),
    (("snow",), ["Warm boots", "Heavy coat", "Gloves"]),
    (("sun", "clear"), ["Sunglasses", "Light colors", "Breathable fabrics"]),
)

OCCASION_ADVISORIES: Dict[OccasionKind, List[str]] = {
    OccasionKind.WORK: ["Blazer", "Dress shirt", "Formal shoes", "Watch", "Belt"],
    OccasionKind.PARTY: ["Dress", "Heels", "Statement jewelry", "Clutch", "Bold lipstick"],
    OccasionKind.CASUAL: ["Jeans", "T-shirt", "Sneakers", "Casual jacket"],
    OccasionKind.DATE: ["Nice dress", "Comfortable heels", "Light perfume", "Small bag"],
    OccasionKind.SPORT: ["Athletic wear", "Sports shoes", "Water bottle", "Towel"],
}

COLD_THRESHOLD = 10.0
HOT_THRESHOLD = 25.0
COLD_CATEGORIES = {"Jackets", "Pants"}
COLD_SEASONS = {"Winter", "All"}
HOT_CATEGORIES = {"Tops", "Dresses"}
HOT_SEASONS = {"Summer", "All"}

OccasionPredicate = Callable[[WardrobeItem], bool]

OCCASION_PREDICATES: Dict[OccasionKind, OccasionPredicate] = {
    OccasionKind.WORK: lambda item: item.category in {"Jackets", "Pants"}
    or item.color.lower() in {"black", "navy"},
    OccasionKind.PARTY: lambda item: item.category in {"Dresses", "Accessories"} or item.favorite,
    OccasionKind.CASUAL: lambda item: item.category in {"Tops", "Pants", "Shoes"},
}


def temperature_band(temperature: float) -> Tuple[str, List[str]]:
    """Return the single band whose strict upper bound exceeds ``temperature``."""

    for upper_bound, name, items in TEMPERATURE_BANDS:
        if temperature < upper_bound:
            return name, list(items)
    name, items = WARM_WEATHER_BAND
    return name, list(items)


def condition_overlays(condition_tag: str) -> List[str]:
    """Gear for the first overlay whose keyword occurs in ``condition_tag``."""

    tag = (condition_tag or "").lower()
    for keywords, items in CONDITION_OVERLAYS:
        if any(keyword in tag for keyword in keywords):
            return list(items)
    return []


def _dedupe(values: Iterable[str]) -> List[str]:
    seen = set()
    unique: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            unique.append(value)
    return unique


def advisory_suggestions(
    weather: Optional[WeatherReading], occasion: Optional[str] = None
) -> OutfitSuggestion:
    """Weather-only suggestions: temperature band, condition overlays, occasion."""

    if weather is None:
        return OutfitSuggestion.insufficient("advisory", "weather data needed for suggestions")

    band_name, combined = temperature_band(weather.temperature)
    overlays = condition_overlays(weather.condition.kind.value)
    combined.extend(overlays)
    occasion_kind = match_occasion(occasion)
    if occasion_kind is not None:
        combined.extend(OCCASION_ADVISORIES[occasion_kind])

    unique = _dedupe(combined)
    advisories = unique[:MAX_ADVISORY_ITEMS]
    logger.info("Built %s advisory suggestions for band %s", len(advisories), band_name)
    return OutfitSuggestion(
        mode="advisory",
        advisories=advisories,
        occasion=occasion_kind,
        diagnostics={
            "temperature_band": band_name,
            "condition_overlays": overlays,
            "occasion": occasion_kind.value if occasion_kind else None,
            "candidates": len(unique),
            "truncated": len(unique) > MAX_ADVISORY_ITEMS,
        },
    )


def filter_by_temperature(items: List[WardrobeItem], temperature: float) -> Tuple[List[WardrobeItem], str]:
    """Narrow the wardrobe for cold or hot weather; mild weather passes everything."""

    if temperature < COLD_THRESHOLD:
        kept = [item for item in items if item.category in COLD_CATEGORIES or item.season in COLD_SEASONS]
        return kept, "cold"
    if temperature > HOT_THRESHOLD:
        kept = [item for item in items if item.category in HOT_CATEGORIES or item.season in HOT_SEASONS]
        return kept, "hot"
    return list(items), "mild"


def filter_by_occasion(
    items: List[WardrobeItem], occasion_kind: Optional[OccasionKind]
) -> Tuple[List[WardrobeItem], bool]:
    """Apply the occasion predicate, keeping the input when nothing would survive.

    Returns the candidates and whether the occasion filter was applied.
    """

    predicate = OCCASION_PREDICATES.get(occasion_kind) if occasion_kind else None
    if predicate is None:
        return items, False
    matches = [item for item in items if predicate(item)]
    if not matches:
        logger.info("Occasion %s removed every candidate; keeping %s items", occasion_kind.value, len(items))
        return items, False
    return matches, True


def select_diverse(
    items: List[WardrobeItem], rng: random.Random, limit: int = MAX_WARDROBE_ITEMS
) -> List[WardrobeItem]:
    """Draw one random item per category in priority order."""

    selected: List[WardrobeItem] = []
    for category in CATEGORIES:
        bucket = [item for item in items if item.category == category]
        if bucket:
            selected.append(rng.choice(bucket))
        if len(selected) >= limit:
            break
    return selected


def wardrobe_suggestions(
    weather: Optional[WeatherReading],
    wardrobe: Sequence[WardrobeItem],
    occasion: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> OutfitSuggestion:
    """Wardrobe-aware selection: temperature filter, occasion filter, diverse draw."""

    if weather is None:
        return OutfitSuggestion.insufficient("wardrobe", "weather data needed for suggestions")
    if not wardrobe:
        return OutfitSuggestion.insufficient("wardrobe", "wardrobe is empty", wardrobe_count=0)

    rng = rng or random.Random()
    items = list(wardrobe)
    temperature_filtered, band = filter_by_temperature(items, weather.temperature)
    occasion_kind = match_occasion(occasion)
    candidates, occasion_applied = filter_by_occasion(temperature_filtered, occasion_kind)
    selected = select_diverse(candidates, rng)

    diagnostics: Dict[str, object] = {
        "wardrobe_count": len(items),
        "temperature_band": band,
        "temperature_filtered_count": len(temperature_filtered),
        "occasion": occasion_kind.value if occasion_kind else None,
        "occasion_filter_applied": occasion_applied,
        "candidate_count": len(candidates),
        "chosen_ids": [item.item_id for item in selected],
    }
    if not selected:
        logger.info("No wardrobe items suit the %s band", band)
        return OutfitSuggestion.insufficient(
            "wardrobe", "no wardrobe items suit the current weather", **diagnostics
        )
    logger.info("Selected %s wardrobe items across categories", len(selected))
    return OutfitSuggestion(mode="wardrobe", items=selected, occasion=occasion_kind, diagnostics=diagnostics)


__all__ = [
    "MAX_ADVISORY_ITEMS",
    "MAX_WARDROBE_ITEMS",
    "TEMPERATURE_BANDS",
    "CONDITION_OVERLAYS",
    "OCCASION_ADVISORIES",
    "OCCASION_PREDICATES",
    "advisory_suggestions",
    "condition_overlays",
    "filter_by_occasion",
    "filter_by_temperature",
    "select_diverse",
    "temperature_band",
    "wardrobe_suggestions",
]
