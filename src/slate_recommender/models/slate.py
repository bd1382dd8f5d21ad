"""
Pipeline output models.

Field aliases keep the camelCase wire format used by slate consumers
(``slateId``, ``contentId``) while Python code uses snake_case.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class SlateItemResult(BaseModel):
    """One ranked item of a persisted slate."""

    model_config = ConfigDict(populate_by_name=True)

    content_id: str = Field(alias="contentId")
    score: int
    reasons: List[str] = Field(default_factory=list)


class SlateResult(BaseModel):
    """Persisted slate id with its items in presentation order."""

    model_config = ConfigDict(populate_by_name=True)

    slate_id: str = Field(alias="slateId")
    items: List[SlateItemResult] = Field(default_factory=list)
