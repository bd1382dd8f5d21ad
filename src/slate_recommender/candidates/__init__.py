"""
Candidate pool module.

Public API for fetching a user's saved items and annotating them with the
behavioral flags consumed by the scorer.
"""

from .flags import (
    frequent_source_threshold,
    is_fresh_forgotten,
    parse_reading_bucket,
    utcnow,
)
from .source import DEFAULT_POOL_LIMIT, CandidateSource

__all__ = [
    "CandidateSource",
    "DEFAULT_POOL_LIMIT",
    "frequent_source_threshold",
    "is_fresh_forgotten",
    "parse_reading_bucket",
    "utcnow",
]
