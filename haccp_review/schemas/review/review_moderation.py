# --- File: haccp_review/schemas/review/review_moderation.py ---
"""
Moderation and dispute request schemas.
"""

from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field

from haccp_review.models.base import DisputeOutcome, DisputeStatus, ReviewerType, VerificationStatus
from haccp_review.schemas.common.base import BaseCreateSchema, BaseSchema

__all__ = [
    "VerificationRequest",
    "RejectionRequest",
    "DisputeFileRequest",
    "DisputeAdvanceRequest",
    "ReviewFilterParams",
]


class VerificationRequest(BaseCreateSchema):
    status: VerificationStatus = VerificationStatus.VERIFIED
    expected_version: Optional[int] = Field(default=None, ge=1)


class RejectionRequest(BaseCreateSchema):
    note: str = Field(..., min_length=1, max_length=2000)


class DisputeFileRequest(BaseCreateSchema):
    reason: str = Field(..., min_length=1, max_length=2000)


class DisputeAdvanceRequest(BaseCreateSchema):
    new_status: DisputeStatus
    notes: Optional[str] = Field(default=None, max_length=2000)
    outcome: DisputeOutcome = DisputeOutcome.UPHELD


class ReviewFilterParams(BaseSchema):
    """Filters for listing a kitchen's reviews."""

    verified: Optional[bool] = None
    min_rating: Optional[Decimal] = Field(default=None, ge=0, le=5)
    reviewer_type: Optional[ReviewerType] = None
    sort: Literal["created_at", "average_rating"] = "created_at"
    order: Literal["asc", "desc"] = "desc"
