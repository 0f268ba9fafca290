# --- File: haccp_review/schemas/notification/__init__.py ---
from haccp_review.schemas.notification.notification_response import (
    NotificationAuditEntryResponse,
    NotificationDetail,
    NotificationResponse,
    UnreadCount,
)

__all__ = [
    "NotificationAuditEntryResponse",
    "NotificationDetail",
    "NotificationResponse",
    "UnreadCount",
]
