"""Tests for match ranking."""

from unittest.mock import Mock

import pytest

from helpers.fakes import make_item
from lostfound.matching.models import FactorScore, MatchCandidate
from lostfound.matching.ranker import MatchRanker
from lostfound.matching.scorer import SimilarityScorer


def fixed_scorer(scores):
    """Scorer stub returning scores[candidate.id]."""
    scorer = Mock(spec=SimilarityScorer)
    scorer.score.side_effect = lambda source, candidate: (
        scores[candidate.id],
        {"category": FactorScore(float(scores[candidate.id]), 100, reason="stub")},
    )
    return scorer


@pytest.fixture
def source():
    return make_item(id="src")


class TestMatchRanker:
    def test_threshold_drops_low_scores(self, source):
        candidates = [make_item(id=i) for i in ("a", "b", "c")]
        ranker = MatchRanker(fixed_scorer({"a": 24, "b": 25, "c": 90}))

        ranked = ranker.rank(source, candidates)

        assert [m.item.id for m in ranked] == ["c", "b"]

    def test_sorted_descending(self, source):
        scores = {"a": 40, "b": 80, "c": 60}
        ranker = MatchRanker(fixed_scorer(scores))

        ranked = ranker.rank(source, [make_item(id=i) for i in scores])

        assert [m.score for m in ranked] == [80, 60, 40]

    def test_top_five(self, source):
        scores = {f"c{i}": 30 + i for i in range(8)}
        ranker = MatchRanker(fixed_scorer(scores))

        ranked = ranker.rank(source, [make_item(id=i) for i in scores])

        assert len(ranked) == 5
        assert [m.item.id for m in ranked] == ["c7", "c6", "c5", "c4", "c3"]

    def test_ties_keep_retrieval_order(self, source):
        scores = {"first": 50, "second": 70, "third": 50, "fourth": 50}
        ranker = MatchRanker(fixed_scorer(scores))

        ranked = ranker.rank(source, [make_item(id=i) for i in scores])

        assert [m.item.id for m in ranked] == ["second", "first", "third", "fourth"]

    def test_no_qualifying_candidates(self, source):
        ranker = MatchRanker(fixed_scorer({"a": 10}))
        assert ranker.rank(source, [make_item(id="a")]) == []

    def test_empty_candidates(self, source):
        assert MatchRanker(SimilarityScorer()).rank(source, []) == []

    def test_custom_threshold_and_top_n(self, source):
        scores = {"a": 55, "b": 45, "c": 65}
        ranker = MatchRanker(fixed_scorer(scores), notify_threshold=50, top_n=1)

        ranked = ranker.rank(source, [make_item(id=i) for i in scores])

        assert [m.item.id for m in ranked] == ["c"]

    def test_returns_match_candidates_with_factors(self, source_item, matching_candidate):
        ranked = MatchRanker(SimilarityScorer()).rank(source_item, [matching_candidate])

        assert len(ranked) == 1
        match = ranked[0]
        assert isinstance(match, MatchCandidate)
        assert match.item is matching_candidate
        assert match.score == 75
        assert set(match.factors) == {"category", "keywords", "location", "recency", "distance"}
        assert match.match_quality == "high"
        assert "Same category" in match.reasons()


class TestMatchCandidate:
    def test_match_quality_bands(self):
        item = make_item()
        assert MatchCandidate(item, 75).match_quality == "high"
        assert MatchCandidate(item, 74).match_quality == "medium"
        assert MatchCandidate(item, 50).match_quality == "medium"
        assert MatchCandidate(item, 49).match_quality == "low"

    def test_reasons_skip_unmatched_factors(self):
        match = MatchCandidate(make_item(), 40, {
            "category": FactorScore(30.0, 30, reason="Same category"),
            "location": FactorScore(0.0, 20, reason=""),
            "recency": FactorScore(9.5, 10, reason="Posted within a day"),
        })
        assert match.reasons() == ["Same category", "Posted within a day"]

    def test_factor_breakdown_is_json_friendly(self):
        match = MatchCandidate(make_item(), 40, {
            "keywords": FactorScore(12.3456, 30, reason="Shared keywords: bag", detail={"shared": ["bag"]}),
        })
        assert match.factor_breakdown() == {
            "keywords": {
                "points": 12.35,
                "max_points": 30,
                "reason": "Shared keywords: bag",
                "detail": {"shared": ["bag"]},
            }
        }
