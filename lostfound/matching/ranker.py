"""Ranking of scored candidates."""

import logging
from typing import Iterable, List, Optional

from lostfound.domain.models import Item
from lostfound.logging import get_logger

from .models import MatchCandidate
from .scorer import SimilarityScorer

logger = get_logger(__name__, component="ranker")

DEFAULT_NOTIFY_THRESHOLD = 25
DEFAULT_TOP_N = 5


class MatchRanker:
    """Scores candidates, drops those below the threshold and keeps the best few.

    Sorting is stable: candidates with equal scores keep retrieval order,
    so the more recently posted item wins a tie.
    """

    def __init__(
        self,
        scorer: SimilarityScorer,
        notify_threshold: int = DEFAULT_NOTIFY_THRESHOLD,
        top_n: int = DEFAULT_TOP_N,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.scorer = scorer
        self.notify_threshold = notify_threshold
        self.top_n = top_n
        self.logger = logger_instance or logger

    def rank(self, source: Item, candidates: Iterable[Item]) -> List[MatchCandidate]:
        """Rank candidates for a source item.

        Args:
            source: Newly posted item
            candidates: Candidates in retrieval order

        Returns:
            At most top_n MatchCandidates with score >= notify_threshold,
            sorted by score descending. Empty when nothing qualifies.
        """
        qualifying: List[MatchCandidate] = []
        scored = 0

        for candidate in candidates:
            score, factors = self.scorer.score(source, candidate)
            scored += 1

            anomalies = {
                name: factor.detail["anomaly"]
                for name, factor in factors.items()
                if "anomaly" in factor.detail
            }
            if anomalies:
                self.logger.debug(
                    f"Candidate {candidate.id} scored with degraded factors",
                    extra={"event": "scoring.anomaly", "candidate_id": candidate.id, "anomalies": anomalies},
                )

            if score < self.notify_threshold:
                continue
            qualifying.append(MatchCandidate(item=candidate, score=score, factors=factors))

        # list.sort is stable, so ties keep retrieval order
        qualifying.sort(key=lambda match: match.score, reverse=True)
        ranked = qualifying[: self.top_n]

        self.logger.info(
            f"Ranked {len(ranked)} matches from {scored} candidates",
            extra={
                "event": "ranking.completed",
                "scored_count": scored,
                "qualifying_count": len(qualifying),
                "returned_count": len(ranked),
                "top_score": ranked[0].score if ranked else None,
            },
        )
        return ranked
