"""Similarity scoring between a newly posted item and a candidate.

The score is a transparent weighted-rule combination. Each factor awards up
to its weight from the ScoringWeights table; the weights sum to 100 so the
total only needs rounding and clamping:

- category: full weight when both categories are identical
- keywords: weight x overlap coefficient of the title+description keywords
- location: exact text match, containment, or partial keyword overlap
- recency: linear decay over the recency window (30 days by default)
- distance: linear decay with haversine distance when both items have coordinates

Scoring is deterministic and performs no I/O. A factor that cannot be
computed from malformed input contributes zero and records the problem
under ``detail["anomaly"]`` instead of raising.
"""

from typing import Callable, Dict, Optional, Tuple

from lostfound.config.duration import SECONDS_PER_DAY
from lostfound.config.models import ScoringWeights
from lostfound.domain.models import Item
from lostfound.logging import get_logger
from lostfound.utils.geo import haversine_meters

from .keywords import extract_keywords, item_keywords
from .models import FactorScore

DEFAULT_RECENCY_WINDOW_SECONDS = 30 * SECONDS_PER_DAY
DEFAULT_DISTANCE_RADIUS_METERS = 1000.0

# Share of the location weight for each kind of textual location match
LOCATION_EXACT_CREDIT = 1.0
LOCATION_CONTAINS_CREDIT = 0.75
LOCATION_PARTIAL_CREDIT = 0.5

logger = get_logger(__name__, component="scorer")

FactorFn = Callable[[Item, Item, int], FactorScore]


def _normalize_location(location: Optional[str]) -> str:
    if not location:
        return ""
    return " ".join(location.lower().split())


class SimilarityScorer:
    """Computes a 0-100 match score and per-factor breakdown for an item pair."""

    def __init__(
        self,
        weights: Optional[ScoringWeights] = None,
        recency_window_seconds: int = DEFAULT_RECENCY_WINDOW_SECONDS,
        distance_radius_meters: float = DEFAULT_DISTANCE_RADIUS_METERS,
    ):
        """Initialize SimilarityScorer.

        Args:
            weights: Factor weight table (defaults to ScoringWeights())
            recency_window_seconds: Gap at which the recency factor reaches zero
            distance_radius_meters: Distance at which the distance factor reaches zero
        """
        if recency_window_seconds <= 0:
            raise ValueError("recency_window_seconds must be positive")
        if distance_radius_meters <= 0:
            raise ValueError("distance_radius_meters must be positive")

        self.weights: Dict[str, int] = (weights or ScoringWeights()).as_dict()
        self.recency_window_seconds = recency_window_seconds
        self.distance_radius_meters = distance_radius_meters

        self._factors: Tuple[Tuple[str, FactorFn], ...] = (
            ("category", self._category_factor),
            ("keywords", self._keyword_factor),
            ("location", self._location_factor),
            ("recency", self._recency_factor),
            ("distance", self._distance_factor),
        )

    def score(self, source: Item, candidate: Item) -> Tuple[int, Dict[str, FactorScore]]:
        """Score a candidate against the source item.

        Args:
            source: Newly posted item
            candidate: Opposite-type item being considered

        Returns:
            Tuple of (score in [0, 100], factor name -> FactorScore)
        """
        factors: Dict[str, FactorScore] = {}

        for name, factor_fn in self._factors:
            weight = self.weights[name]
            try:
                factor = factor_fn(source, candidate, weight)
            except Exception as e:
                logger.debug(
                    f"Could not score {name} for candidate {candidate.id}: {e}",
                    extra={"event": "scoring.anomaly", "factor": name, "candidate_id": candidate.id},
                )
                factor = FactorScore(
                    points=0.0,
                    max_points=weight,
                    reason=f"{name} not scored",
                    detail={"anomaly": f"{type(e).__name__}: {e}"},
                )
            # Guard against a rule awarding more than its weight
            factor.points = max(0.0, min(float(weight), factor.points))
            factors[name] = factor

        total = sum(factor.points for factor in factors.values())
        return max(0, min(100, int(round(total)))), factors

    @staticmethod
    def _category_factor(source: Item, candidate: Item, weight: int) -> FactorScore:
        if source.category is None or candidate.category is None:
            return FactorScore(0.0, weight, detail={"anomaly": "missing category"})

        if source.category == candidate.category:
            return FactorScore(
                float(weight), weight, reason="Same category",
                detail={"category": source.category.value},
            )

        return FactorScore(
            0.0, weight,
            detail={"source": source.category.value, "candidate": candidate.category.value},
        )

    @staticmethod
    def _keyword_factor(source: Item, candidate: Item, weight: int) -> FactorScore:
        source_keywords = item_keywords(source)
        candidate_keywords = item_keywords(candidate)

        if not source_keywords or not candidate_keywords:
            return FactorScore(0.0, weight, detail={"shared": [], "overlap": 0.0})

        shared = source_keywords & candidate_keywords
        # Overlap coefficient: a short title fully contained in a longer
        # description still counts as a strong textual match
        overlap = len(shared) / min(len(source_keywords), len(candidate_keywords))

        reason = f"Shared keywords: {', '.join(sorted(shared))}" if shared else ""
        return FactorScore(
            weight * overlap, weight, reason=reason,
            detail={"shared": sorted(shared), "overlap": round(overlap, 3)},
        )

    @staticmethod
    def _location_factor(source: Item, candidate: Item, weight: int) -> FactorScore:
        source_location = _normalize_location(source.location)
        candidate_location = _normalize_location(candidate.location)

        if not source_location or not candidate_location:
            return FactorScore(0.0, weight, detail={"match": "missing"})

        if source_location == candidate_location:
            return FactorScore(
                weight * LOCATION_EXACT_CREDIT, weight, reason="Same location",
                detail={"match": "exact"},
            )

        if source_location in candidate_location or candidate_location in source_location:
            return FactorScore(
                weight * LOCATION_CONTAINS_CREDIT, weight, reason="Similar location",
                detail={"match": "contains"},
            )

        source_terms = extract_keywords(source_location)
        candidate_terms = extract_keywords(candidate_location)
        union = source_terms | candidate_terms
        if not union:
            return FactorScore(0.0, weight, detail={"match": "none"})

        shared = source_terms & candidate_terms
        similarity = len(shared) / len(union)
        if not shared:
            return FactorScore(0.0, weight, detail={"match": "none"})

        return FactorScore(
            weight * LOCATION_PARTIAL_CREDIT * similarity, weight, reason="Nearby location",
            detail={"match": "partial", "shared": sorted(shared), "similarity": round(similarity, 3)},
        )

    def _recency_factor(self, source: Item, candidate: Item, weight: int) -> FactorScore:
        if source.created_at is None or candidate.created_at is None:
            return FactorScore(0.0, weight, detail={"anomaly": "missing created_at"})

        gap_seconds = abs((source.created_at - candidate.created_at).total_seconds())
        days_apart = gap_seconds / SECONDS_PER_DAY
        ratio = max(0.0, 1.0 - gap_seconds / self.recency_window_seconds)

        if ratio <= 0:
            reason = ""
        elif days_apart <= 1:
            reason = "Posted within a day"
        elif days_apart <= 3:
            reason = "Posted within 3 days"
        elif days_apart <= 7:
            reason = "Posted within a week"
        else:
            reason = f"Posted {int(days_apart)} days apart"

        return FactorScore(
            weight * ratio, weight, reason=reason,
            detail={"days_apart": round(days_apart, 2)},
        )

    def _distance_factor(self, source: Item, candidate: Item, weight: int) -> FactorScore:
        if (
            source.coordinates is None
            or candidate.coordinates is None
            or not source.coordinates.is_complete
            or not candidate.coordinates.is_complete
        ):
            return FactorScore(0.0, weight, detail={"meters": None})

        meters = haversine_meters(
            source.coordinates.latitude,
            source.coordinates.longitude,
            candidate.coordinates.latitude,
            candidate.coordinates.longitude,
        )
        ratio = max(0.0, 1.0 - meters / self.distance_radius_meters)

        reason = f"About {int(round(meters))} m apart" if ratio > 0 else ""
        return FactorScore(
            weight * ratio, weight, reason=reason,
            detail={"meters": round(meters, 1)},
        )
