"""Outfit suggestion schema."""

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Literal, Optional

from models.taxonomy import OccasionKind
from models.wardrobe_item import WardrobeItem

SuggestionMode = Literal["advisory", "wardrobe"]
SuggestionStatus = Literal["ok", "insufficient_data"]


@dataclass
class OutfitSuggestion:
    """Either advisory strings or a category-diverse subset of the wardrobe."""

    mode: SuggestionMode
    status: SuggestionStatus = "ok"
    advisories: List[str] = field(default_factory=list)
    items: List[WardrobeItem] = field(default_factory=list)
    occasion: Optional[OccasionKind] = None
    reason: Optional[str] = None
    diagnostics: Dict[str, object] = field(default_factory=dict)

    @classmethod
    def insufficient(cls, mode: SuggestionMode, reason: str, **diagnostics: object) -> "OutfitSuggestion":
        return cls(mode=mode, status="insufficient_data", reason=reason, diagnostics=dict(diagnostics))

    def to_dict(self) -> Dict[str, object]:
        return {
            "mode": self.mode,
            "status": self.status,
            "advisories": list(self.advisories),
            "items": [asdict(item) for item in self.items],
            "occasion": self.occasion.value if self.occasion else None,
            "reason": self.reason,
            "diagnostics": dict(self.diagnostics),
        }


__all__ = ["OutfitSuggestion", "SuggestionMode", "SuggestionStatus"]
