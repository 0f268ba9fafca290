"""
Notification Repository - notifications and their audit trail.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload

from haccp_review.core.exceptions import RepositoryError
from haccp_review.models.base import (
    ActorRole,
    NotificationAuditAction,
    NotificationStatus,
    TargetRole,
)
from haccp_review.models.notification import Notification, NotificationAuditEntry
from haccp_review.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """
    Repository for notifications, including per-actor visibility queries.
    """

    def __init__(self, session: Session):
        super().__init__(Notification, session)

    def get_with_audit(self, notification_id: str) -> Optional[Notification]:
        try:
            return (
                self.query()
                .options(selectinload(Notification.audit_trail))
                .filter(Notification.id == notification_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find notification failed: {str(e)}", operation="select") from e

    def visible_to(self, role: ActorRole, code: str) -> Query:
        """
        Notifications visible to an actor.

        Admins see everything; schools and consumers see what they created
        or what is addressed to their school code; kitchens and suppliers
        see notifications targeted at their role or at everyone.
        """
        query = self.query()
        if role == ActorRole.ADMIN:
            return query
        if role in (ActorRole.SCHOOL, ActorRole.CONSUMER):
            return query.filter(
                or_(Notification.created_by == code, Notification.school_code == code)
            )
        return query.filter(
            Notification.target_role.in_([TargetRole(role.value), TargetRole.ALL])
        )

    def find_for_actor(
        self,
        role: ActorRole,
        code: str,
        *,
        status: Optional[NotificationStatus] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Notification]:
        """Visible notifications, newest first."""
        query = self.visible_to(role, code)
        if status is not None:
            query = query.filter(Notification.status == status)
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc())
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        try:
            return query.all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find for actor failed: {str(e)}", operation="select") from e

    def count_for_actor(
        self,
        role: ActorRole,
        code: str,
        status: Optional[NotificationStatus] = None,
    ) -> int:
        query = self.visible_to(role, code)
        if status is not None:
            query = query.filter(Notification.status == status)
        try:
            return query.count()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Count for actor failed: {str(e)}", operation="count") from e

    def find_open_for_review(self, review_id: str) -> List[Notification]:
        """Notifications of a review that are not yet resolved."""
        return self.find_by_criteria(
            {
                "review_id": review_id,
                "status": [NotificationStatus.NEW, NotificationStatus.VIEWED],
            },
            limit=None,
            order_by=["created_at"],
        )


class NotificationAuditRepository(BaseRepository[NotificationAuditEntry]):
    """Append-only access to ``notification_audit_trail``."""

    def __init__(self, session: Session):
        super().__init__(NotificationAuditEntry, session)

    def append(
        self,
        notification: Notification,
        action: NotificationAuditAction,
        user_code: str,
        timestamp: datetime,
    ) -> NotificationAuditEntry:
        entry = NotificationAuditEntry(
            notification_id=notification.id,
            action=action,
            user_code=user_code,
            timestamp=timestamp,
        )
        notification.audit_trail.append(entry)
        return self.create(entry)

    def list_for_notification(self, notification_id: str) -> List[NotificationAuditEntry]:
        return self.find_by_criteria(
            {"notification_id": notification_id}, limit=None, order_by=["timestamp"]
        )
