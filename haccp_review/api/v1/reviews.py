"""
Review authoring, moderation and dispute endpoints.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Response, status

from haccp_review.api.deps import (
    get_dispute_service,
    get_principal,
    get_review_service,
    get_verification_service,
)
from haccp_review.schemas.review import (
    BatchReviewResponse,
    DisputeAdvanceRequest,
    DisputeFileRequest,
    DisputeHistoryEntryResponse,
    RejectionRequest,
    ReviewDetail,
    ReviewResponse,
    VerificationRequest,
)
from haccp_review.services.common import Principal
from haccp_review.services.review import (
    ReviewDisputeService,
    ReviewService,
    ReviewVerificationService,
)

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def submit_review(
    payload: Dict[str, Any] = Body(...),
    principal: Principal = Depends(get_principal),
    service: ReviewService = Depends(get_review_service),
):
    """Submit a review; it starts unverified and undisputed."""
    return service.submit_review(payload, principal)


@router.post("/batch", response_model=BatchReviewResponse)
def submit_batch(
    reviews: List[Dict[str, Any]] = Body(..., embed=True),
    principal: Principal = Depends(get_principal),
    service: ReviewService = Depends(get_review_service),
):
    """Submit several reviews; each item reports its own outcome."""
    return service.submit_batch(reviews, principal)


@router.get("/{review_id}", response_model=ReviewDetail)
def get_review(
    review_id: str,
    principal: Principal = Depends(get_principal),
    service: ReviewService = Depends(get_review_service),
):
    return service.get_review(review_id, principal)


@router.patch("/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: str,
    patch: Dict[str, Any] = Body(...),
    principal: Principal = Depends(get_principal),
    service: ReviewService = Depends(get_review_service),
):
    return service.update_review(review_id, patch, principal)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: str,
    principal: Principal = Depends(get_principal),
    service: ReviewService = Depends(get_review_service),
):
    service.delete_review(review_id, principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Moderation ----------------------------------------------------------------

@router.post("/{review_id}/verify", response_model=ReviewResponse)
def verify_review(
    review_id: str,
    request: Optional[VerificationRequest] = None,
    moderator: Principal = Depends(get_principal),
    service: ReviewVerificationService = Depends(get_verification_service),
):
    """Advance verification; reaching ``verified`` may raise a notification."""
    request = request or VerificationRequest()
    return service.set_verification_status(
        review_id, request.status, moderator, expected_version=request.expected_version
    )


@router.post("/{review_id}/reject", response_model=ReviewDetail)
def reject_review(
    review_id: str,
    request: RejectionRequest,
    moderator: Principal = Depends(get_principal),
    service: ReviewVerificationService = Depends(get_verification_service),
):
    return service.reject_review(review_id, moderator, request.note)


# --- Disputes ------------------------------------------------------------------

@router.post("/{review_id}/dispute", response_model=ReviewDetail)
def file_dispute(
    review_id: str,
    request: DisputeFileRequest,
    principal: Principal = Depends(get_principal),
    service: ReviewDisputeService = Depends(get_dispute_service),
):
    return service.file_dispute(review_id, request.reason, principal)


@router.post("/{review_id}/dispute/advance", response_model=ReviewDetail)
def advance_dispute(
    review_id: str,
    request: DisputeAdvanceRequest,
    moderator: Principal = Depends(get_principal),
    service: ReviewDisputeService = Depends(get_dispute_service),
):
    return service.advance_dispute(
        review_id, request.new_status, moderator, notes=request.notes, outcome=request.outcome
    )


@router.get("/{review_id}/dispute/history", response_model=List[DisputeHistoryEntryResponse])
def dispute_history(
    review_id: str,
    principal: Principal = Depends(get_principal),
    service: ReviewService = Depends(get_review_service),
):
    return service.get_dispute_history(review_id, principal)
