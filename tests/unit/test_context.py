"""
Unit tests for request context normalization.
"""

from datetime import datetime, timezone

import pytest

from slate_recommender.context import bucket_hour, local_hour, normalize_context
from slate_recommender.models.recommendation import Device, TimeOfDay


class TestBucketHour:
    """Test hour to time-of-day mapping."""

    @pytest.mark.parametrize(
        "hour,expected",
        [
            (0, TimeOfDay.LATE),
            (4, TimeOfDay.LATE),
            (5, TimeOfDay.MORNING),
            (11, TimeOfDay.MORNING),
            (12, TimeOfDay.AFTERNOON),
            (16, TimeOfDay.AFTERNOON),
            (17, TimeOfDay.EVENING),
            (21, TimeOfDay.EVENING),
            (22, TimeOfDay.LATE),
            (23, TimeOfDay.LATE),
        ],
    )
    def test_buckets(self, hour, expected):
        assert bucket_hour(hour) == expected


class TestLocalHour:
    """Test hour derivation from a time zone."""

    def test_converts_to_zone(self):
        now = datetime(2026, 6, 1, 10, 0, tzinfo=timezone.utc)

        assert local_hour(now, "Asia/Tokyo") == 19
        assert local_hour(now, "UTC") == 10

    def test_invalid_zone_falls_back(self):
        now = datetime(2026, 6, 1, 10, 0)

        assert local_hour(now, "Not/AZone") == 10

    def test_no_zone_naive_time(self):
        assert local_hour(datetime(2026, 6, 1, 23, 30), None) == 23


class TestNormalizeContext:
    """Test normalize_context."""

    def test_defaults(self):
        context = normalize_context(now=datetime(2026, 6, 1, 8, 0))

        assert context.device == Device.UNKNOWN
        assert context.local_time_of_day == TimeOfDay.MORNING
        assert context.allow_same_domain is None

    def test_explicit_time_of_day_wins(self):
        context = normalize_context(
            local_time_of_day=TimeOfDay.LATE,
            tz="UTC",
            now=datetime(2026, 6, 1, 9, 0, tzinfo=timezone.utc),
        )

        assert context.local_time_of_day == TimeOfDay.LATE

    def test_derived_from_zone(self):
        context = normalize_context(
            device=Device.MOBILE,
            tz="America/New_York",
            now=datetime(2026, 6, 1, 22, 0, tzinfo=timezone.utc),
        )

        # 18:00 in New York (EDT)
        assert context.local_time_of_day == TimeOfDay.EVENING
        assert context.device == Device.MOBILE

    def test_allow_same_domain_passed_through(self):
        context = normalize_context(allow_same_domain=True, now=datetime(2026, 6, 1, 13, 0))

        assert context.allow_same_domain is True
        assert context.to_score_context().local_time_of_day == TimeOfDay.AFTERNOON

    def test_always_sets_time_of_day(self):
        assert normalize_context().local_time_of_day in set(TimeOfDay)
