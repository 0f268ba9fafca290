# --- File: haccp_review/schemas/review/review_response.py ---
"""
Review response schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from haccp_review.models.base import (
    ConfidenceLevel,
    DisputeAction,
    DisputeStatus,
    ReportSource,
    ReviewerType,
    RootCause,
    VerificationStatus,
)
from haccp_review.schemas.common.base import BaseResponseSchema, BaseSchema
from haccp_review.schemas.review.review_base import HaccpRatings, ReviewEvidence

__all__ = [
    "DisputeHistoryEntryResponse",
    "ReviewResponse",
    "ReviewDetail",
    "PublicReviewResponse",
    "BatchReviewResult",
    "BatchReviewResponse",
]


class DisputeHistoryEntryResponse(BaseSchema):
    timestamp: datetime
    action: DisputeAction
    by_user_id: str
    by_user_code: str
    notes: Optional[str] = None


class ReviewResponse(BaseResponseSchema):
    """Review as returned to its author, moderators and the kitchen."""

    kitchen_id: str
    reviewer_id: str
    reviewer_code: str
    reviewer_name: str
    reviewer_type: ReviewerType
    ratings: HaccpRatings
    average_rating: Decimal = Field(..., description="Mean of the six ratings")
    comment: str
    photos: List[str]
    verification_status: VerificationStatus
    verified: bool
    report_source: ReportSource
    confidence_level: ConfidenceLevel
    root_causes: List[RootCause]
    evidence: Optional[ReviewEvidence] = None
    dispute_status: DisputeStatus
    is_draft: bool
    version: int
    updated_at: datetime


class ReviewDetail(ReviewResponse):
    """Review with moderation annotations and dispute history."""

    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    rejection_note: Optional[str] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    dispute_history: List[DisputeHistoryEntryResponse] = Field(default_factory=list)


class PublicReviewResponse(BaseResponseSchema):
    """Verified review as shown publicly; reviewer identity is reduced to name and type."""

    kitchen_id: str
    reviewer_name: str
    reviewer_type: ReviewerType
    ratings: HaccpRatings
    average_rating: Decimal
    comment: str
    photos: List[str]


class BatchReviewResult(BaseSchema):
    index: int
    kitchen_id: Optional[str] = None
    status: Literal["created", "failed"]
    review_id: Optional[str] = None
    error: Optional[str] = None


class BatchReviewResponse(BaseSchema):
    created: int
    failed: int
    results: List[BatchReviewResult]
