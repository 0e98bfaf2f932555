"""Matching run orchestration."""

from .models import MatchRunResult
from .runner import MatchingPipeline, create_pipeline, run_matching

__all__ = [
    "MatchingPipeline",
    "MatchRunResult",
    "create_pipeline",
    "run_matching",
]
