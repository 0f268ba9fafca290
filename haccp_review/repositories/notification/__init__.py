from haccp_review.repositories.notification.notification_repository import (
    NotificationAuditRepository,
    NotificationRepository,
)

__all__ = ["NotificationRepository", "NotificationAuditRepository"]
