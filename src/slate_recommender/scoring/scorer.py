"""
Explainable candidate scoring.

Each active boolean signal whose weight is nonzero adds its weight to the score
and appends a fixed reason label:

- never opened
- fresh forgotten
- time fit (reading bucket suits the local time of day)
- frequent source
- bridge (spans more than one theme)

The final score is rounded to the nearest integer. Scoring is pure: identical
candidate, context and weight table always give the same result.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

import structlog

from slate_recommender.models.recommendation import (
    Candidate,
    ReadingBucket,
    ScoreContext,
    Scored,
    TimeOfDay,
)
from slate_recommender.scoring.weights import ScoringWeights


logger = structlog.get_logger(__name__)


REASON_NEVER_OPENED = "never opened"
REASON_FRESH_FORGOTTEN = "fresh forgotten"
REASON_FREQUENT_SOURCE = "frequent source"
REASON_BRIDGE = "bridge"

# Reading buckets that suit each time of day
TIME_FIT: Dict[TimeOfDay, FrozenSet[ReadingBucket]] = {
    TimeOfDay.MORNING: frozenset({ReadingBucket.SHORT, ReadingBucket.MEDIUM}),
    TimeOfDay.AFTERNOON: frozenset({ReadingBucket.MEDIUM, ReadingBucket.LONG}),
    TimeOfDay.EVENING: frozenset({ReadingBucket.LONG, ReadingBucket.XLONG}),
    TimeOfDay.LATE: frozenset({ReadingBucket.SHORT}),
}


def time_fits(bucket: Optional[ReadingBucket], time_of_day: Optional[TimeOfDay]) -> bool:
    """Return True if the reading bucket suits the time of day."""
    if bucket is None or time_of_day is None:
        return False
    return bucket in TIME_FIT.get(time_of_day, frozenset())


def time_fit_reason(time_of_day: TimeOfDay, bucket: ReadingBucket) -> str:
    """Reason label for a time fit, e.g. ``fits morning-short``."""
    return f"fits {time_of_day.value}-{bucket.value.lower()}"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class ScoreResult:
    """Integer score with the ordered reasons that produced it."""
    score: int
    reasons: List[str] = field(default_factory=list)


class Scorer:
    """
    Weighted, explainable scorer.

    The weight table is fixed at construction; build one Scorer per process
    from ``load_weights()``.
    """

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or ScoringWeights.zero()

    def score(self, candidate: Candidate, context: Optional[ScoreContext] = None) -> ScoreResult:
        """
        Score a single candidate.

        Args:
            candidate: Annotated candidate
            context: Normalized request context (time of day drives time fit)

        Returns:
            ScoreResult with integer score and reason labels
        """
        w = self.weights
        total = 0.0
        reasons: List[str] = []

        if candidate.never_opened and w.never_opened != 0:
            total += w.never_opened
            reasons.append(REASON_NEVER_OPENED)

        if candidate.is_fresh_forgotten and w.fresh_forgotten != 0:
            total += w.fresh_forgotten
            reasons.append(REASON_FRESH_FORGOTTEN)

        time_of_day = context.local_time_of_day if context is not None else None
        if time_fits(candidate.reading_bucket, time_of_day) and w.time_fit != 0:
            total += w.time_fit
            reasons.append(time_fit_reason(time_of_day, candidate.reading_bucket))

        if candidate.is_frequent_source and w.frequent_source != 0:
            total += w.frequent_source
            reasons.append(REASON_FREQUENT_SOURCE)

        if candidate.is_bridge and w.bridge != 0:
            total += w.bridge
            reasons.append(REASON_BRIDGE)

        return ScoreResult(score=round_half_up(total), reasons=reasons)

    def score_all(
        self, candidates: List[Candidate], context: Optional[ScoreContext] = None
    ) -> List[Scored]:
        """Score every candidate, preserving input order."""
        scored = []
        for candidate in candidates:
            result = self.score(candidate, context)
            scored.append(Scored.from_candidate(candidate, result.score, result.reasons))

        logger.debug(
            "candidates_scored",
            count=len(scored),
            nonzero=sum(1 for s in scored if s.score != 0),
        )
        return scored
