# haccp_review/services/review/review_mapping.py
"""
ORM -> schema mappers shared by the review services.
"""
from __future__ import annotations

from haccp_review.models.base import RootCause
from haccp_review.models.review import Review
from haccp_review.schemas.review import (
    DisputeHistoryEntryResponse,
    HaccpRatings,
    PublicReviewResponse,
    ReviewDetail,
    ReviewEvidence,
    ReviewResponse,
)


def _ratings(review: Review) -> HaccpRatings:
    return HaccpRatings(**{category.value: value for category, value in review.ratings.items()})


def to_review_response(review: Review) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        kitchen_id=review.kitchen_id,
        reviewer_id=review.reviewer_id,
        reviewer_code=review.reviewer_code,
        reviewer_name=review.reviewer_name,
        reviewer_type=review.reviewer_type,
        ratings=_ratings(review),
        average_rating=review.average_rating,
        comment=review.comment,
        photos=list(review.photos or []),
        verification_status=review.verification_status,
        verified=review.verified,
        report_source=review.report_source,
        confidence_level=review.confidence_level,
        root_causes=[RootCause(value) for value in (review.root_causes or [])],
        evidence=ReviewEvidence.model_validate(review.evidence) if review.evidence else None,
        dispute_status=review.dispute_status,
        is_draft=review.is_draft,
        version=review.version,
        created_at=review.created_at,
        updated_at=review.updated_at,
    )


def to_review_detail(review: Review) -> ReviewDetail:
    return ReviewDetail(
        **to_review_response(review).model_dump(),
        verified_by=review.verified_by,
        verified_at=review.verified_at,
        rejection_note=review.rejection_note,
        rejected_by=review.rejected_by,
        rejected_at=review.rejected_at,
        dispute_history=[
            DisputeHistoryEntryResponse.model_validate(entry)
            for entry in review.dispute_history
        ],
    )


def to_public_review(review: Review) -> PublicReviewResponse:
    return PublicReviewResponse(
        id=review.id,
        kitchen_id=review.kitchen_id,
        reviewer_name=review.reviewer_name,
        reviewer_type=review.reviewer_type,
        ratings=_ratings(review),
        average_rating=review.average_rating,
        comment=review.comment,
        photos=list(review.photos or []),
        created_at=review.created_at,
    )
