"""Data models for the matching engine.

These structures are computed during a single matching run and discarded
once notifications have been dispatched.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from lostfound.domain.models import Item

FACTOR_NAMES = ("category", "keywords", "location", "recency", "distance")


@dataclass
class FactorScore:
    """Contribution of one similarity factor to a match score.

    Attributes:
        points: Points awarded (0 to max_points, may be fractional)
        max_points: Weight of the factor
        reason: Human-readable explanation used in notification text
        detail: Evidence behind the points (shared keywords, days apart, ...)
    """

    points: float
    max_points: int
    reason: str = ""
    detail: Dict[str, Any] = field(default_factory=dict)

    @property
    def matched(self) -> bool:
        return self.points > 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["points"] = round(self.points, 2)
        return data


@dataclass
class MatchCandidate:
    """A scored opposite-type item.

    Attributes:
        item: The candidate item
        score: Integer score in [0, 100]
        factors: Factor name -> FactorScore breakdown
    """

    item: Item
    score: int
    factors: Dict[str, FactorScore] = field(default_factory=dict)

    @property
    def match_quality(self) -> str:
        """Coarse confidence label: "high" (>= 75), "medium" (>= 50) or "low"."""
        if self.score >= 75:
            return "high"
        if self.score >= 50:
            return "medium"
        return "low"

    def reasons(self) -> List[str]:
        """Reasons of the factors that contributed points, in factor order."""
        return [
            self.factors[name].reason
            for name in FACTOR_NAMES
            if name in self.factors and self.factors[name].matched and self.factors[name].reason
        ]

    def factor_breakdown(self) -> Dict[str, Dict[str, Any]]:
        """JSON-friendly factor breakdown for notification payloads and logs."""
        return {name: factor.to_dict() for name, factor in self.factors.items()}
