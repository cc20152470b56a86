"""Failure kinds surfaced by the recommendation pipeline."""
from __future__ import annotations

from enum import Enum

from .models import CandidateCounts


class Stage(str, Enum):
    pooling = "pooling"
    ranking = "ranking"
    allocating = "allocating"
    enhancing = "enhancing"
    done = "done"


class RecommendationError(Exception):
    """Base class; ``code`` is the stable identifier returned to callers."""

    code = "RECOMMENDATION_FAILED"
    stage = Stage.pooling

    def __init__(self, message: str, counts: CandidateCounts | None = None):
        self.message = message
        self.counts = counts
        super().__init__(message)


class EmptyPoolError(RecommendationError):
    """No approved locations exist in the requested scope."""

    code = "NO_LOCATIONS"
    stage = Stage.pooling


class NoMatchingLocationsError(RecommendationError):
    """The pool was built but preferences excluded every location."""

    code = "NO_MATCHING_LOCATIONS"
    stage = Stage.ranking


class NoDestinationsError(RecommendationError):
    """Candidates exist but none fits the budget, even on its own."""

    code = "NO_DESTINATIONS"
    stage = Stage.allocating


class InvalidCandidateDataError(RecommendationError):
    """A candidate lacks data a strategy needs (e.g. a usable position)."""

    code = "INVALID_CANDIDATE_DATA"
    stage = Stage.ranking
