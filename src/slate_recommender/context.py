"""
Request context normalization.

Turns the raw context of a recommend request into a RequestContext: device
defaults to ``unknown``; a time-of-day bucket supplied by the client is kept,
otherwise it is derived from the hour of ``now`` in the client's IANA zone.
"""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from slate_recommender.models.recommendation import Device, RequestContext, TimeOfDay


logger = structlog.get_logger(__name__)


def bucket_hour(hour: int) -> TimeOfDay:
    """
    Map an hour (0-23) to a time-of-day bucket.

    05-11 morning, 12-16 afternoon, 17-21 evening, anything else late.
    """
    if 5 <= hour <= 11:
        return TimeOfDay.MORNING
    if 12 <= hour <= 16:
        return TimeOfDay.AFTERNOON
    if 17 <= hour <= 21:
        return TimeOfDay.EVENING
    return TimeOfDay.LATE


def local_hour(now: datetime, tz: Optional[str]) -> int:
    """
    Hour of ``now`` in zone ``tz``.

    Missing or invalid zones fall back to the server's local time. Naive
    ``now`` values are taken as server local time.
    """
    if tz:
        try:
            zone = ZoneInfo(tz)
        except (ZoneInfoNotFoundError, ValueError):
            logger.debug("context_invalid_timezone", tz=tz)
        else:
            return now.astimezone(zone).hour

    if now.tzinfo is not None:
        return now.astimezone().hour
    return now.hour


def normalize_context(
    device: Optional[Device] = None,
    local_time_of_day: Optional[TimeOfDay] = None,
    allow_same_domain: Optional[bool] = None,
    tz: Optional[str] = None,
    now: Optional[datetime] = None,
) -> RequestContext:
    """
    Build a normalized request context.

    Args:
        device: Client device class (default: unknown)
        local_time_of_day: Client-supplied bucket; wins over tz/now when present
        allow_same_domain: Selection preference, passed through
        tz: IANA zone name used to derive the bucket
        now: Reference time (default: current time)

    Returns:
        RequestContext with a time-of-day bucket always set
    """
    device = device or Device.UNKNOWN

    if local_time_of_day is None:
        hour = local_hour(now or datetime.now().astimezone(), tz)
        local_time_of_day = bucket_hour(hour)

    return RequestContext(
        device=device,
        local_time_of_day=local_time_of_day,
        allow_same_domain=allow_same_domain,
    )
