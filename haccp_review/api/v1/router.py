"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints of the review engine
"""
from fastapi import APIRouter

from haccp_review.api.v1 import kitchens, notifications, reviews

router = APIRouter(
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        503: {"description": "Transaction Failed"},
    }
)

router.include_router(reviews.router)
router.include_router(notifications.router)
router.include_router(kitchens.router)


@router.get("/health", tags=["Health"])
def health_check():
    return {"status": "ok"}
