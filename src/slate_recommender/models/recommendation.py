"""
Data models for candidates, scoring context and scored candidates.

Candidates are produced once per pipeline run by the candidate source and are
immutable for the rest of the run. Scored candidates carry the candidate fields
plus the explainable score.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field


# ============================================================================
# ENUMS
# ============================================================================

class ReadingBucket(str, Enum):
    """Coarse content-length classification."""
    SHORT = "SHORT"
    MEDIUM = "MEDIUM"
    LONG = "LONG"
    XLONG = "XLONG"


class Device(str, Enum):
    """Device class of the requesting client."""
    MOBILE = "mobile"
    DESKTOP = "desktop"
    UNKNOWN = "unknown"


class TimeOfDay(str, Enum):
    """Local time-of-day bucket of the requesting user."""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    LATE = "late"


# ============================================================================
# CANDIDATES
# ============================================================================

class Candidate(BaseModel):
    """
    A saved item eligible for recommendation, annotated with behavioral flags.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Content identifier")
    domain: str = Field(description="Source domain ('unknown' when not recorded)")
    saved_at: datetime = Field(description="When the user saved the item (UTC)")
    reading_bucket: Optional[ReadingBucket] = Field(
        default=None, description="Reading length bucket, absent when not computed"
    )
    theme_ids: Tuple[str, ...] = Field(
        default=(), description="Topic tags; order carries no meaning beyond iteration"
    )

    never_opened: bool = False
    is_fresh_forgotten: bool = False
    is_frequent_source: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_bridge(self) -> bool:
        """True iff the item spans more than one theme."""
        return len(self.theme_ids) > 1


class Scored(Candidate):
    """Candidate plus its integer score and ordered reason labels."""

    score: int = 0
    reasons: List[str] = Field(default_factory=list)

    @classmethod
    def from_candidate(cls, candidate: Candidate, score: int, reasons: List[str]) -> "Scored":
        data = candidate.model_dump(exclude={"is_bridge"})
        return cls(**data, score=score, reasons=list(reasons))


# ============================================================================
# CONTEXT
# ============================================================================

class ScoreContext(BaseModel):
    """Already-normalized request context used by the scorer."""

    model_config = ConfigDict(frozen=True)

    device: Device = Device.UNKNOWN
    local_time_of_day: Optional[TimeOfDay] = None


class RequestContext(ScoreContext):
    """Score context plus the selection preferences carried by the request."""

    allow_same_domain: Optional[bool] = None

    def to_score_context(self) -> ScoreContext:
        return ScoreContext(device=self.device, local_time_of_day=self.local_time_of_day)
