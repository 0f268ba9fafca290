# haccp_review/services/notification/notification_dispatcher.py
"""
Notification dispatch and lifecycle.

- Raise a notification when a verified review reports a HACCP problem.
- Move notifications forward (new -> viewed -> resolved) with an audit entry per change.
- List notifications visible to an actor.
"""
from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from haccp_review.config.logging import get_logger
from haccp_review.config.settings import Settings, get_settings
from haccp_review.models.base import (
    NotificationAuditAction,
    NotificationStatus,
    RootCause,
)
from haccp_review.models.notification import Notification
from haccp_review.models.review import Review
from haccp_review.repositories.kitchen import KitchenRepository
from haccp_review.repositories.notification import (
    NotificationAuditRepository,
    NotificationRepository,
)
from haccp_review.schemas.common.pagination import PaginationParams
from haccp_review.schemas.notification import (
    NotificationAuditEntryResponse,
    NotificationDetail,
    NotificationResponse,
)
from haccp_review.services.common import (
    ForbiddenError,
    NotFoundError,
    Principal,
    UnitOfWork,
    conflicts_on,
)
from haccp_review.services.common.state_machine import (
    NOTIFICATION_TRANSITIONS,
    ensure_transition,
)
from haccp_review.utils.datetime_utils import utcnow

from .notification_rules import (
    DispatchRules,
    build_description,
    build_title,
    derive_priority,
    derive_target_role,
    is_visible_to,
    lowest_category,
    school_code_for,
    should_notify,
)

logger = get_logger(__name__)


class NotificationDispatcher:
    """
    Creates role-targeted notifications from verified reviews and manages
    their status and audit trail.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._session_factory = session_factory
        self._rules = DispatchRules.from_settings(settings or get_settings())
        self._clock = clock or utcnow

    def _now(self) -> datetime:
        return self._clock()

    def _get_repo(self, uow: UnitOfWork) -> NotificationRepository:
        return uow.get_repo(NotificationRepository)

    def _get_audit_repo(self, uow: UnitOfWork) -> NotificationAuditRepository:
        return uow.get_repo(NotificationAuditRepository)

    # ------------------------------------------------------------------ #
    # Dispatch (runs inside the caller's unit of work)
    # ------------------------------------------------------------------ #

    def on_review_verified(
        self,
        uow: UnitOfWork,
        review: Review,
        moderator: Principal,
    ) -> Optional[Notification]:
        """
        Create the notification a freshly verified review calls for.

        Returns ``None`` when every rating meets the threshold and no root
        cause was reported. The notification and its ``Created`` audit entry
        are written in ``uow`` so they commit or roll back with the
        verification itself.
        """
        ratings = review.ratings
        root_causes = [RootCause(value) for value in (review.root_causes or [])]

        if not should_notify(ratings, root_causes, self._rules):
            logger.info(
                f"Review {review.id} verified without notification",
                extra={"review_id": review.id},
            )
            return None

        kitchen = uow.get_repo(KitchenRepository).find_by_id(review.kitchen_id)
        if kitchen is None:
            raise NotFoundError("Kitchen", review.kitchen_id)

        category = lowest_category(ratings)
        priority = derive_priority(ratings, review.confidence_level, root_causes, self._rules)
        now = self._now()

        notification = Notification(
            title=build_title(category, priority, kitchen.name),
            description=build_description(category, ratings[category], root_causes, review.comment),
            category=category,
            priority=priority,
            kitchen_code=kitchen.code,
            school_code=school_code_for(review.reviewer_type, review.reviewer_code),
            review_id=review.id,
            status=NotificationStatus.NEW,
            target_role=derive_target_role(review.report_source),
            created_by=review.reviewer_code,
            created_at=now,
            updated_at=now,
        )
        self._get_repo(uow).create(notification)
        self._get_audit_repo(uow).append(
            notification, NotificationAuditAction.CREATED, moderator.code, now
        )

        logger.info(
            f"Notification {notification.id} created for review {review.id} "
            f"({category.value}/{priority.value} -> {notification.target_role.value})",
            extra={"review_id": review.id, "notification_id": notification.id},
        )
        return notification

    def resolve_for_review(
        self,
        uow: UnitOfWork,
        review_id: str,
        moderator: Principal,
    ) -> List[Notification]:
        """Resolve every open notification of a review inside ``uow``."""
        resolved = []
        for notification in self._get_repo(uow).find_open_for_review(review_id):
            self._advance(uow, notification, NotificationStatus.RESOLVED, moderator)
            resolved.append(notification)
        return resolved

    # ------------------------------------------------------------------ #
    # Status changes
    # ------------------------------------------------------------------ #

    def mark_viewed(self, notification_id: str, principal: Principal) -> NotificationResponse:
        """
        new -> viewed. Viewing again is a no-op; a resolved notification
        cannot be viewed.
        """
        with conflicts_on("Notification", notification_id), UnitOfWork(self._session_factory) as uow:
            notification = self._get_visible(uow, notification_id, principal)
            if notification.status != NotificationStatus.VIEWED:
                self._advance(uow, notification, NotificationStatus.VIEWED, principal)
            uow.flush()
            return self._to_response(notification)

    def mark_resolved(self, notification_id: str, principal: Principal) -> NotificationResponse:
        """new|viewed -> resolved. Resolving again returns the terminal state unchanged."""
        with conflicts_on("Notification", notification_id), UnitOfWork(self._session_factory) as uow:
            notification = self._get_visible(uow, notification_id, principal)
            if notification.status != NotificationStatus.RESOLVED:
                self._advance(uow, notification, NotificationStatus.RESOLVED, principal)
            uow.flush()
            return self._to_response(notification)

    def _advance(
        self,
        uow: UnitOfWork,
        notification: Notification,
        target: NotificationStatus,
        principal: Principal,
    ) -> None:
        ensure_transition("Notification", NOTIFICATION_TRANSITIONS, notification.status, target)
        now = self._now()
        previous = notification.status
        notification.status = target
        notification.updated_at = now
        action = (
            NotificationAuditAction.VIEWED
            if target == NotificationStatus.VIEWED
            else NotificationAuditAction.RESOLVED
        )
        self._get_audit_repo(uow).append(notification, action, principal.code, now)
        logger.info(
            f"Notification {notification.id} {previous.value} -> {target.value} by {principal.code}",
            extra={"notification_id": notification.id, "user_code": principal.code},
        )

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def list_for_actor(
        self,
        principal: Principal,
        *,
        status: Optional[NotificationStatus] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> List[NotificationResponse]:
        """Notifications visible to ``principal``, newest first."""
        with UnitOfWork(self._session_factory) as uow:
            items = self._get_repo(uow).find_for_actor(
                principal.role,
                principal.code,
                status=status,
                offset=pagination.offset if pagination else 0,
                limit=pagination.limit if pagination else None,
            )
            return [self._to_response(n) for n in items]

    def get_notification(self, notification_id: str, principal: Principal) -> NotificationDetail:
        with UnitOfWork(self._session_factory) as uow:
            notification = self._get_visible(uow, notification_id, principal)
            response = self._to_response(notification)
            return NotificationDetail(
                **response.model_dump(),
                audit_trail=[
                    NotificationAuditEntryResponse.model_validate(entry)
                    for entry in self._get_audit_repo(uow).list_for_notification(notification.id)
                ],
            )

    def unread_count(self, principal: Principal) -> int:
        with UnitOfWork(self._session_factory) as uow:
            return self._get_repo(uow).count_for_actor(
                principal.role, principal.code, status=NotificationStatus.NEW
            )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _get_visible(
        self,
        uow: UnitOfWork,
        notification_id: str,
        principal: Principal,
    ) -> Notification:
        notification = self._get_repo(uow).get_with_audit(notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        if not is_visible_to(
            principal,
            target_role=notification.target_role,
            created_by=notification.created_by,
            school_code=notification.school_code,
        ):
            raise ForbiddenError(
                f"Notification {notification_id} is not addressed to {principal.code}"
            )
        return notification

    @staticmethod
    def _to_response(notification: Notification) -> NotificationResponse:
        return NotificationResponse.model_validate(notification)
