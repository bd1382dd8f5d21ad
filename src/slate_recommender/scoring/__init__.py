"""Scoring module.

Loads the weight table (failing open to zero weights) and scores candidates
with explainable reason labels.
"""

from .scorer import (
    TIME_FIT,
    ScoreResult,
    Scorer,
    time_fits,
)
from .weights import ScoringWeights, WeightsLoadResult, load_weights, read_weights_file

__all__ = [
    "Scorer",
    "ScoreResult",
    "time_fits",
    "TIME_FIT",
    "ScoringWeights",
    "WeightsLoadResult",
    "load_weights",
    "read_weights_file",
]
