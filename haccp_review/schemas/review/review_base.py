# --- File: haccp_review/schemas/review/review_base.py ---
"""
Base review schemas with validation.

Ratings use the Annotated Decimal pattern: 0.0 to 5.0 inclusive with at
most one decimal place.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Dict, List, Optional

from pydantic import Field, field_validator

from haccp_review.models.base import (
    ConfidenceLevel,
    HaccpCategory,
    ReportSource,
    ReviewerType,
    RootCause,
)
from haccp_review.schemas.common.base import BaseCreateSchema, BaseSchema, BaseUpdateSchema

__all__ = [
    "COMMENT_MIN_LENGTH",
    "COMMENT_MAX_LENGTH",
    "MAX_PHOTOS",
    "Rating",
    "HaccpRatings",
    "ReviewEvidence",
    "ReviewCreate",
    "ReviewUpdate",
]

COMMENT_MIN_LENGTH = 10
COMMENT_MAX_LENGTH = 1000
MAX_PHOTOS = 5

Rating = Annotated[
    Decimal,
    Field(
        ge=Decimal("0.0"),
        le=Decimal("5.0"),
        max_digits=2,
        decimal_places=1,
        description="HACCP rating (0.0 to 5.0, in 0.1 increments)",
    ),
]


class HaccpRatings(BaseSchema):
    """The six HACCP dimension ratings."""

    taste: Rating
    hygiene: Rating
    freshness: Rating
    temperature: Rating
    packaging: Rating
    handling: Rating

    def by_category(self) -> Dict[HaccpCategory, Decimal]:
        return {category: getattr(self, category.value) for category in HaccpCategory}


class ReviewEvidence(BaseSchema):
    """Supporting evidence attached to a report."""

    photo_timestamp: Optional[datetime] = None
    menu_code: Optional[str] = Field(default=None, max_length=100)
    school_location: Optional[str] = Field(default=None, max_length=255)
    consumption_time: Optional[str] = Field(default=None, max_length=50)
    symptoms: List[str] = Field(default_factory=list)


Comment = Annotated[
    str,
    Field(
        min_length=COMMENT_MIN_LENGTH,
        max_length=COMMENT_MAX_LENGTH,
        description="Free-text review (10 to 1000 characters)",
    ),
]

Photos = Annotated[
    List[str],
    Field(max_length=MAX_PHOTOS, description="Photo URLs (at most 5)"),
]


def _unique_root_causes(v: Optional[List[RootCause]]) -> Optional[List[RootCause]]:
    """Drop repeated root causes, keeping first occurrence order."""
    if v is None:
        return v
    return list(dict.fromkeys(v))


class ReviewCreate(BaseCreateSchema):
    """
    Payload for submitting a review.

    ``confidence_level`` defaults from ``report_source`` when omitted.
    """

    kitchen_id: str = Field(..., min_length=1, max_length=36)
    reviewer_name: str = Field(..., min_length=1, max_length=255)
    reviewer_type: ReviewerType
    ratings: HaccpRatings
    comment: Comment
    photos: Photos = Field(default_factory=list)
    report_source: ReportSource = ReportSource.PUBLIC
    confidence_level: Optional[ConfidenceLevel] = None
    root_causes: List[RootCause] = Field(default_factory=list)
    evidence: Optional[ReviewEvidence] = None
    is_draft: bool = False

    @field_validator("root_causes")
    @classmethod
    def dedupe_root_causes(cls, v):
        return _unique_root_causes(v)


class ReviewUpdate(BaseUpdateSchema):
    """
    Partial update by the review's author.

    Identity fields (kitchen, reviewer, report source) cannot be changed.
    """

    ratings: Optional[HaccpRatings] = None
    comment: Optional[Comment] = None
    photos: Optional[Photos] = None
    root_causes: Optional[List[RootCause]] = None
    evidence: Optional[ReviewEvidence] = None
    is_draft: Optional[bool] = None

    @field_validator("root_causes")
    @classmethod
    def dedupe_root_causes(cls, v):
        return _unique_root_causes(v)
