"""
Notification endpoints, scoped to what the caller may see.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from haccp_review.api.deps import get_dispatcher, get_pagination_params, get_principal
from haccp_review.models.base import NotificationStatus
from haccp_review.schemas.common.pagination import PaginationParams
from haccp_review.schemas.notification import NotificationDetail, NotificationResponse, UnreadCount
from haccp_review.services.common import Principal
from haccp_review.services.notification import NotificationDispatcher

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationResponse])
def list_notifications(
    status: Optional[NotificationStatus] = Query(default=None),
    pagination: PaginationParams = Depends(get_pagination_params),
    principal: Principal = Depends(get_principal),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Newest first."""
    return dispatcher.list_for_actor(principal, status=status, pagination=pagination)


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(
    principal: Principal = Depends(get_principal),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return UnreadCount(unread=dispatcher.unread_count(principal))


@router.get("/{notification_id}", response_model=NotificationDetail)
def get_notification(
    notification_id: str,
    principal: Principal = Depends(get_principal),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return dispatcher.get_notification(notification_id, principal)


@router.post("/{notification_id}/view", response_model=NotificationResponse)
def mark_viewed(
    notification_id: str,
    principal: Principal = Depends(get_principal),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return dispatcher.mark_viewed(notification_id, principal)


@router.post("/{notification_id}/resolve", response_model=NotificationResponse)
def mark_resolved(
    notification_id: str,
    principal: Principal = Depends(get_principal),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return dispatcher.mark_resolved(notification_id, principal)
