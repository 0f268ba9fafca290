"""
Kitchen-scoped reads: reviews, compliance trend and badges.
"""
from decimal import Decimal
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from haccp_review.api.deps import (
    get_badge_service,
    get_pagination_params,
    get_principal,
    get_review_service,
    get_trend_service,
)
from haccp_review.models.base import ReviewerType
from haccp_review.schemas.analytics import ComplianceTrendResponse
from haccp_review.schemas.common.pagination import PaginatedResponse, PaginationParams
from haccp_review.schemas.review import (
    BadgeCreate,
    BadgeResponse,
    PublicReviewResponse,
    ReviewFilterParams,
    ReviewResponse,
)
from haccp_review.services.analytics import ComplianceTrendService
from haccp_review.services.common import Principal
from haccp_review.services.review import PerformanceBadgeService, ReviewService

router = APIRouter(prefix="/kitchens", tags=["Kitchens"])


@router.get("/{kitchen_id}/reviews", response_model=PaginatedResponse[ReviewResponse])
def list_kitchen_reviews(
    kitchen_id: str,
    verified: Optional[bool] = Query(default=None),
    min_rating: Optional[Decimal] = Query(default=None, ge=0, le=5),
    reviewer_type: Optional[ReviewerType] = Query(default=None),
    sort: Literal["created_at", "average_rating"] = Query(default="created_at"),
    order: Literal["asc", "desc"] = Query(default="desc"),
    pagination: PaginationParams = Depends(get_pagination_params),
    principal: Principal = Depends(get_principal),
    service: ReviewService = Depends(get_review_service),
):
    filters = ReviewFilterParams(
        verified=verified,
        min_rating=min_rating,
        reviewer_type=reviewer_type,
        sort=sort,
        order=order,
    )
    return service.list_kitchen_reviews(kitchen_id, filters, pagination)


@router.get("/{kitchen_id}/reviews/public", response_model=PaginatedResponse[PublicReviewResponse])
def list_public_reviews(
    kitchen_id: str,
    pagination: PaginationParams = Depends(get_pagination_params),
    service: ReviewService = Depends(get_review_service),
):
    """Verified reviews only; no identity required."""
    return service.list_public_reviews(kitchen_id, pagination)


@router.get("/{kitchen_id}/trend", response_model=ComplianceTrendResponse)
def compliance_trend(
    kitchen_id: str,
    months: Optional[int] = Query(default=None),
    principal: Principal = Depends(get_principal),
    service: ComplianceTrendService = Depends(get_trend_service),
):
    return service.get_trend(kitchen_id, months).to_response()


@router.get("/{kitchen_id}/badges", response_model=List[BadgeResponse])
def list_badges(
    kitchen_id: str,
    service: PerformanceBadgeService = Depends(get_badge_service),
):
    return service.list_badges(kitchen_id)


@router.post("/{kitchen_id}/badges", response_model=BadgeResponse, status_code=status.HTTP_201_CREATED)
def award_badge(
    kitchen_id: str,
    payload: BadgeCreate,
    moderator: Principal = Depends(get_principal),
    service: PerformanceBadgeService = Depends(get_badge_service),
):
    return service.award_badge(kitchen_id, payload, moderator)
