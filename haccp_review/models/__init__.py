"""
ORM models. Importing this package registers every table on ``Base.metadata``.
"""

from haccp_review.models.base import Base
from haccp_review.models.kitchen import Incident, Kitchen
from haccp_review.models.review import DisputeHistoryEntry, PerformanceBadge, Review
from haccp_review.models.notification import Notification, NotificationAuditEntry

__all__ = [
    "Base",
    "Kitchen",
    "Incident",
    "Review",
    "DisputeHistoryEntry",
    "PerformanceBadge",
    "Notification",
    "NotificationAuditEntry",
]
