"""
Behavioral flags computed for each candidate.

Pure helpers so the rules can be tested without a data store:

- fresh forgotten: never opened and saved between 10 and 3 days ago (both bounds inclusive)
- frequent source: the domain's save count reaches the user's 90th percentile domain,
  and at least an absolute floor
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from slate_recommender.models.recommendation import ReadingBucket


FRESH_FORGOTTEN_MIN_DAYS = 3
FRESH_FORGOTTEN_MAX_DAYS = 10
FREQUENT_SOURCE_MIN_SAVES = 3
UNKNOWN_DOMAIN = "unknown"


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the store keeps naive UTC timestamps)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def is_fresh_forgotten(
    saved_at: datetime,
    never_opened: bool,
    now: Optional[datetime] = None,
    min_days: int = FRESH_FORGOTTEN_MIN_DAYS,
    max_days: int = FRESH_FORGOTTEN_MAX_DAYS,
) -> bool:
    """
    Return True if an unopened item was saved within the fresh-forgotten window.

    Args:
        saved_at: Save timestamp
        never_opened: Whether the user never opened the item
        now: Reference time (default: current UTC time)
        min_days: Newest edge of the window, in days before now
        max_days: Oldest edge of the window, in days before now

    Examples:
        >>> now = datetime(2026, 1, 20)
        >>> is_fresh_forgotten(datetime(2026, 1, 15), True, now)
        True
        >>> is_fresh_forgotten(datetime(2026, 1, 19), True, now)
        False
    """
    if not never_opened:
        return False

    now = as_naive_utc(now or utcnow())
    saved_at = as_naive_utc(saved_at)
    newest = now - timedelta(days=min_days)
    oldest = now - timedelta(days=max_days)
    return oldest <= saved_at <= newest


def frequent_source_threshold(
    domain_save_counts: Sequence[int],
    min_saves: int = FREQUENT_SOURCE_MIN_SAVES,
) -> int:
    """
    Save count a domain must reach to be a frequent source.

    ``domain_save_counts`` are the user's domain save counts in descending
    order. The percentile entry sits at index ``floor(n * 0.1) - 1`` clamped
    to 0; the threshold is the larger of that count and ``min_saves``. With
    no domain stats the floor alone applies.

    Examples:
        >>> frequent_source_threshold([40, 30, 20, 10, 9, 8, 7, 6, 5, 4, 3, 2])
        40
        >>> frequent_source_threshold([2, 1])
        3
        >>> frequent_source_threshold([])
        3
    """
    if not domain_save_counts:
        return min_saves

    index = max(0, math.floor(len(domain_save_counts) * 0.1) - 1)
    percentile_count = domain_save_counts[index] or 0
    return max(percentile_count, min_saves)


def parse_reading_bucket(value: Optional[str]) -> Optional[ReadingBucket]:
    """Parse a stored reading bucket; unknown or missing values read as absent."""
    if not value:
        return None
    try:
        return ReadingBucket(value.upper())
    except ValueError:
        return None
