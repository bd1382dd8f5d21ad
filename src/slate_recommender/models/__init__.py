# Data models for the slate recommendation pipeline

from .recommendation import (
    Candidate,
    Device,
    ReadingBucket,
    RequestContext,
    ScoreContext,
    Scored,
    TimeOfDay,
)
from .slate import SlateItemResult, SlateResult
from .api_models import (
    ErrorResponse,
    HealthResponse,
    RecommendRequest,
    VersionResponse,
)

__all__ = [
    "Candidate",
    "Scored",
    "ReadingBucket",
    "Device",
    "TimeOfDay",
    "ScoreContext",
    "RequestContext",
    "SlateItemResult",
    "SlateResult",
    "RecommendRequest",
    "ErrorResponse",
    "HealthResponse",
    "VersionResponse",
]
