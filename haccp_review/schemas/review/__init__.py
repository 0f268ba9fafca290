# --- File: haccp_review/schemas/review/__init__.py ---
from haccp_review.schemas.review.review_base import (
    HaccpRatings,
    ReviewCreate,
    ReviewEvidence,
    ReviewUpdate,
)
from haccp_review.schemas.review.review_response import (
    BatchReviewResponse,
    BatchReviewResult,
    DisputeHistoryEntryResponse,
    PublicReviewResponse,
    ReviewDetail,
    ReviewResponse,
)
from haccp_review.schemas.review.review_moderation import (
    DisputeAdvanceRequest,
    DisputeFileRequest,
    RejectionRequest,
    ReviewFilterParams,
    VerificationRequest,
)
from haccp_review.schemas.review.badge import BadgeCreate, BadgeResponse

__all__ = [
    "HaccpRatings",
    "ReviewCreate",
    "ReviewEvidence",
    "ReviewUpdate",
    "BatchReviewResponse",
    "BatchReviewResult",
    "DisputeHistoryEntryResponse",
    "PublicReviewResponse",
    "ReviewDetail",
    "ReviewResponse",
    "DisputeAdvanceRequest",
    "DisputeFileRequest",
    "RejectionRequest",
    "ReviewFilterParams",
    "VerificationRequest",
    "BadgeCreate",
    "BadgeResponse",
]
