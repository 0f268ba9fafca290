"""
FastAPI dependencies: the calling principal and the services.

Identity is asserted upstream by the auth gateway and forwarded in
``X-User-*`` headers.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, Query, Request, status

from haccp_review.config.logging import get_logger
from haccp_review.models.base import ActorRole
from haccp_review.schemas.common.pagination import PaginationParams
from haccp_review.services.analytics import ComplianceTrendService
from haccp_review.services.common import Principal
from haccp_review.services.notification import NotificationDispatcher
from haccp_review.services.review import (
    PerformanceBadgeService,
    ReviewDisputeService,
    ReviewService,
    ReviewVerificationService,
)

logger = get_logger(__name__)


# --- Identity ------------------------------------------------------------------

def get_principal(
    x_user_id: Optional[str] = Header(default=None),
    x_user_code: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
    x_user_kitchens: Optional[str] = Header(default=None),
) -> Principal:
    """
    Build the calling ``Principal`` from forwarded identity headers.
    """
    if not x_user_id or not x_user_code or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing identity headers",
        )
    try:
        role = ActorRole(x_user_role.strip().lower())
    except ValueError:
        logger.warning(f"Rejected unknown role header '{x_user_role}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown role '{x_user_role}'",
        )

    kitchen_ids = frozenset(
        k.strip() for k in (x_user_kitchens or "").split(",") if k.strip()
    )
    return Principal(user_id=x_user_id, code=x_user_code, role=role, kitchen_ids=kitchen_ids)


# --- Pagination ----------------------------------------------------------------

def get_pagination_params(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> PaginationParams:
    return PaginationParams(page=page, page_size=page_size)


# --- Services ------------------------------------------------------------------

def get_dispatcher(request: Request) -> NotificationDispatcher:
    state = request.app.state
    return NotificationDispatcher(state.session_factory, settings=state.settings, clock=state.clock)


def get_review_service(request: Request) -> ReviewService:
    state = request.app.state
    return ReviewService(state.session_factory, settings=state.settings, clock=state.clock)


def get_verification_service(
    request: Request,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> ReviewVerificationService:
    state = request.app.state
    return ReviewVerificationService(
        state.session_factory, dispatcher=dispatcher, settings=state.settings, clock=state.clock
    )


def get_dispute_service(
    request: Request,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> ReviewDisputeService:
    state = request.app.state
    return ReviewDisputeService(
        state.session_factory, dispatcher=dispatcher, settings=state.settings, clock=state.clock
    )


def get_badge_service(request: Request) -> PerformanceBadgeService:
    return PerformanceBadgeService(request.app.state.session_factory)


def get_trend_service(request: Request) -> ComplianceTrendService:
    state = request.app.state
    return ComplianceTrendService(state.session_factory, settings=state.settings, clock=state.clock)


__all__ = [
    "get_principal",
    "get_pagination_params",
    "get_dispatcher",
    "get_review_service",
    "get_verification_service",
    "get_dispute_service",
    "get_badge_service",
    "get_trend_service",
]
