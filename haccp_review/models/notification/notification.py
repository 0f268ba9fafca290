"""
Core notification model.

Notifications are raised when a verified review reports a HACCP problem
and are addressed to a target role rather than to individual users.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from haccp_review.models.base import (
    AppendOnlyMixin,
    BaseModel,
    HaccpCategory,
    NotificationAuditAction,
    NotificationPriority,
    NotificationStatus,
    TargetRole,
    TimestampMixin,
    enum_column,
)
from haccp_review.utils.datetime_utils import utcnow

__all__ = ["Notification", "NotificationAuditEntry"]


class Notification(BaseModel, TimestampMixin):
    """
    Role-targeted notification derived from a verified review.

    Status only moves forward (new -> viewed -> resolved); every status
    change, and the creation itself, appends one audit entry.
    """

    __tablename__ = "notifications"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(enum_column(HaccpCategory, 20), nullable=False)
    priority = Column(enum_column(NotificationPriority, 10), nullable=False, index=True)

    kitchen_code = Column(String(50), nullable=False, index=True)
    school_code = Column(String(50), nullable=True, index=True)
    review_id = Column(
        String(36),
        ForeignKey("reviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status = Column(
        enum_column(NotificationStatus, 10),
        nullable=False,
        default=NotificationStatus.NEW,
        index=True,
    )
    target_role = Column(enum_column(TargetRole, 10), nullable=False, index=True)
    created_by = Column(String(50), nullable=False, index=True)

    version = Column(Integer, nullable=False, comment="Optimistic lock counter")

    audit_trail = relationship(
        "NotificationAuditEntry",
        back_populates="notification",
        cascade="all, delete-orphan",
        order_by="NotificationAuditEntry.timestamp",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_notification_target_created", "target_role", "created_at"),
        Index("idx_notification_review_status", "review_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id}, category={self.category}, "
            f"priority={self.priority}, status={self.status})>"
        )


class NotificationAuditEntry(BaseModel, AppendOnlyMixin):
    """Append-only record of a notification lifecycle event."""

    __tablename__ = "notification_audit_trail"

    notification_id = Column(
        String(36),
        ForeignKey("notifications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    timestamp = Column(DateTime, nullable=False, default=utcnow)
    action = Column(enum_column(NotificationAuditAction, 10), nullable=False)
    user_code = Column(String(50), nullable=False)

    notification = relationship("Notification", back_populates="audit_trail")

    def __repr__(self) -> str:
        return f"<NotificationAuditEntry(notification_id={self.notification_id}, action={self.action})>"
