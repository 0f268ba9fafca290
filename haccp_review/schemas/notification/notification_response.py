# --- File: haccp_review/schemas/notification/notification_response.py ---
"""
Notification response schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from haccp_review.models.base import (
    HaccpCategory,
    NotificationAuditAction,
    NotificationPriority,
    NotificationStatus,
    TargetRole,
)
from haccp_review.schemas.common.base import BaseResponseSchema, BaseSchema

__all__ = [
    "NotificationAuditEntryResponse",
    "NotificationResponse",
    "NotificationDetail",
    "UnreadCount",
]


class NotificationAuditEntryResponse(BaseSchema):
    timestamp: datetime
    action: NotificationAuditAction
    user_code: str


class NotificationResponse(BaseResponseSchema):
    title: str
    description: str
    category: HaccpCategory
    priority: NotificationPriority
    kitchen_code: str
    school_code: Optional[str] = None
    review_id: str
    status: NotificationStatus
    target_role: TargetRole
    created_by: str
    updated_at: datetime
    version: int


class NotificationDetail(NotificationResponse):
    audit_trail: List[NotificationAuditEntryResponse] = Field(default_factory=list)


class UnreadCount(BaseSchema):
    unread: int = Field(..., ge=0)
