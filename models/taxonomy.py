"""Canonical taxonomy definitions for wardrobe items and occasions.

This module centralises the canonical labels for categories, seasons, calendar
event types and occasion keywords. Helper functions keep validation and
keyword matching consistent across stores, agents and the suggestion engine.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple


# Priority order used by the category-diverse outfit draw.
CATEGORIES: List[str] = ["Tops", "Pants", "Dresses", "Jackets", "Shoes", "Accessories"]
SEASONS: List[str] = ["All", "Spring", "Summer", "Fall", "Winter"]
EVENT_TYPES: List[str] = ["work", "casual", "formal", "party", "sport", "other"]


class OccasionKind(str, Enum):
    WORK = "work"
    PARTY = "party"
    CASUAL = "casual"
    DATE = "date"
    SPORT = "sport"


# Ordered: the first kind whose keyword occurs in the label wins.
OCCASION_KEYWORDS: List[Tuple[OccasionKind, Tuple[str, ...]]] = [
    (OccasionKind.WORK, ("work", "office")),
    (OccasionKind.PARTY, ("party", "celebration")),
    (OccasionKind.CASUAL, ("casual", "weekend")),
    (OccasionKind.DATE, ("date",)),
    (OccasionKind.SPORT, ("sport", "gym")),
]

# Calendar event type -> occasion label understood by the keyword table.
EVENT_TYPE_OCCASIONS: Dict[str, str] = {
    "work": "work",
    "formal": "work",
    "casual": "casual",
    "party": "party",
    "sport": "sport",
}


def _normalize_key(value: str) -> str:
    return value.strip().lower()


def validate_category(value: str) -> str:
    """Return the canonical spelling of a category.

    Unknown but non-empty categories are kept verbatim as locale-specific
    extensions. Raises a :class:`ValueError` for blank input.
    """

    stripped = (value or "").strip()
    if not stripped:
        raise ValueError("category is required")
    for category in CATEGORIES:
        if category.lower() == stripped.lower():
            return category
    return stripped


def validate_season(value: Optional[str]) -> str:
    """Validate a season label, defaulting blank input to ``All``."""

    stripped = (value or "").strip()
    if not stripped:
        return "All"
    for season in SEASONS:
        if season.lower() == stripped.lower():
            return season
    raise ValueError(f"Unsupported season '{value}'. Allowed: {SEASONS}")


def validate_event_type(value: Optional[str]) -> str:
    key = _normalize_key(value or "other")
    if key not in EVENT_TYPES:
        raise ValueError(f"Unsupported event type '{value}'. Allowed: {EVENT_TYPES}")
    return key


def match_occasion(label: Optional[str]) -> Optional[OccasionKind]:
    """Map a free-text occasion label onto the keyword table.

    Matching is case-insensitive substring containment evaluated in table
    order, so ``"office party"`` resolves to :attr:`OccasionKind.WORK`.
    """

    text = _normalize_key(label or "")
    if not text:
        return None
    for kind, keywords in OCCASION_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return kind
    return None


__all__ = [
    "CATEGORIES",
    "SEASONS",
    "EVENT_TYPES",
    "OccasionKind",
    "OCCASION_KEYWORDS",
    "EVENT_TYPE_OCCASIONS",
    "validate_category",
    "validate_season",
    "validate_event_type",
    "match_occasion",
]
