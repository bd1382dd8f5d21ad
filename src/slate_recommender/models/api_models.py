"""
API request and response models for FastAPI endpoints.

Request bodies use the camelCase wire names of slate consumers; service
endpoints answer in snake_case.
"""

from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

from .recommendation import Device, TimeOfDay


class RecommendContextIn(BaseModel):
    """Raw request context, normalized by ``context.normalize_context``."""

    model_config = ConfigDict(populate_by_name=True)

    device: Optional[Device] = None
    local_time_of_day: Optional[TimeOfDay] = Field(default=None, alias="localTimeOfDay")
    allow_same_domain: Optional[bool] = Field(default=None, alias="allowSameDomain")
    tz: Optional[str] = Field(default=None, description="IANA time zone, e.g. 'Europe/Rome'")


class RecommendRequest(BaseModel):
    """Request model for the recommend endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)
    k: Optional[int] = Field(default=None, gt=0, description="Slate size (capped server-side)")
    context: Optional[RecommendContextIn] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="healthy | unhealthy", examples=["healthy"])
    version: str = Field(description="API version", examples=["1.0.0"])
    uptime_seconds: float = Field(description="Service uptime")
    store_reachable: bool = Field(description="Data store answered a trivial query")
    weights_version: int = Field(description="Version of the loaded weight table")
    weights_degraded: bool = Field(description="True when scoring fell back to zero weights")


class VersionResponse(BaseModel):
    """Version information response."""

    api_version: str = Field(description="API version")
    components: Dict[str, str] = Field(description="Pipeline component versions")
    weights_version: int = Field(description="Version of the loaded weight table")
    weights_degraded: bool = Field(description="True when scoring fell back to zero weights")


class ErrorResponse(BaseModel):
    """Error payload returned when a request fails server-side."""

    success: bool = False
    error: str = Field(description="Error class name")
    detail: Optional[str] = None
    request_id: Optional[str] = None
