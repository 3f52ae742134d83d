from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from verifyx.core.rules import DEFAULT_RULESET, Ruleset

NO_RED_FLAGS = "No immediate red flags found"


class Category(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def level(self) -> str:
        """Traffic-light label used by the web client"""
        return _LEVELS[self]


_LEVELS = {
    Category.LOW: "green",
    Category.MEDIUM: "yellow",
    Category.HIGH: "red",
}


def category_for_score(score: int, ruleset: Ruleset = DEFAULT_RULESET) -> Category:
    if score >= ruleset.high_threshold:
        return Category.HIGH
    elif score >= ruleset.medium_threshold:
        return Category.MEDIUM
    else:
        return Category.LOW


@dataclass(frozen=True)
class Verdict:
    """Result of one analysis call"""
    score: int
    category: Category
    reasons: Tuple[str, ...] = ()
    features: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # Read-only view of the features
        object.__setattr__(self, "features", MappingProxyType(dict(self.features)))

    @property
    def level(self) -> str:
        return self.category.level

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "category": self.category.value,
            "level": self.level,
            "reasons": list(self.reasons),
            "features": dict(self.features),
        }
