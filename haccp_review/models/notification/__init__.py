from haccp_review.models.notification.notification import Notification, NotificationAuditEntry

__all__ = ["Notification", "NotificationAuditEntry"]
