"""Smart matching engine for lost and found items.

This package provides:
- extract_keywords / item_keywords: text to significant-term sets
- SimilarityScorer: multi-factor 0-100 similarity score with breakdown
- CandidateRetriever / ItemStore: same-campus opposite-type candidate lookup
- MatchRanker: thresholding, stable sorting and top-N capping
- MatchCandidate / FactorScore: per-run match data structures
"""

from .keywords import extract_keywords, item_keywords
from .models import FACTOR_NAMES, FactorScore, MatchCandidate
from .ranker import MatchRanker
from .retriever import CandidateRetriever, ItemStore
from .scorer import SimilarityScorer

__all__ = [
    "extract_keywords",
    "item_keywords",
    "FACTOR_NAMES",
    "FactorScore",
    "MatchCandidate",
    "MatchRanker",
    "CandidateRetriever",
    "ItemStore",
    "SimilarityScorer",
]
