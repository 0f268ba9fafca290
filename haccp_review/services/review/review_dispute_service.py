# haccp_review/services/review/review_dispute_service.py
"""
Review disputes: none -> disputed -> under_review -> resolved.

Every step appends one entry to the dispute history in the same unit of
work as the status change.
"""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from haccp_review.config.logging import get_logger
from haccp_review.config.settings import Settings, get_settings
from haccp_review.models.base import (
    ActorRole,
    DisputeAction,
    DisputeOutcome,
    DisputeStatus,
)
from haccp_review.models.review import Review
from haccp_review.repositories.review import DisputeHistoryRepository, ReviewRepository
from haccp_review.schemas.review import ReviewDetail
from haccp_review.services.common import (
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    Principal,
    UnitOfWork,
    ValidationError,
    conflicts_on,
    require_admin,
    require_role,
)
from haccp_review.services.common.state_machine import DISPUTE_TRANSITIONS, ensure_transition
from haccp_review.services.notification.notification_dispatcher import NotificationDispatcher
from haccp_review.utils.datetime_utils import utcnow

from .review_mapping import to_review_detail

logger = get_logger(__name__)

_ADVANCE_ACTIONS = {
    (DisputeStatus.UNDER_REVIEW, DisputeOutcome.UPHELD): DisputeAction.UNDER_REVIEW,
    (DisputeStatus.UNDER_REVIEW, DisputeOutcome.REJECTED): DisputeAction.UNDER_REVIEW,
    (DisputeStatus.RESOLVED, DisputeOutcome.UPHELD): DisputeAction.RESOLVED,
    (DisputeStatus.RESOLVED, DisputeOutcome.REJECTED): DisputeAction.REJECTED,
}


class ReviewDisputeService:
    """
    Kitchens and suppliers dispute reviews of their kitchen; administrators
    move disputes to review and resolution.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        dispatcher: Optional[NotificationDispatcher] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock or utcnow
        self._dispatcher = dispatcher or NotificationDispatcher(
            session_factory, settings=settings or get_settings(), clock=self._clock
        )

    def _now(self) -> datetime:
        return self._clock()

    def _get_review(self, uow: UnitOfWork, review_id: str) -> Review:
        review = uow.get_repo(ReviewRepository).get_with_history(review_id)
        if review is None:
            raise NotFoundError("Review", review_id)
        return review

    def _get_history_repo(self, uow: UnitOfWork) -> DisputeHistoryRepository:
        return uow.get_repo(DisputeHistoryRepository)

    def file_dispute(self, review_id: str, reason: str, principal: Principal) -> ReviewDetail:
        """
        Open a dispute on a review of the principal's kitchen.

        Raises:
            ForbiddenError: If the principal is not a kitchen or supplier
                affiliated with the reviewed kitchen
            InvalidTransitionError: If the review is a draft or already has a dispute
        """
        require_role(
            principal,
            [ActorRole.KITCHEN, ActorRole.SUPPLIER],
            error_message="Only kitchens and suppliers may dispute reviews",
        )
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A dispute reason is required", field="reason")

        with conflicts_on("Review", review_id), UnitOfWork(self._session_factory) as uow:
            review = self._get_review(uow, review_id)
            if not principal.is_affiliated_with(review.kitchen_id):
                raise ForbiddenError(
                    f"{principal.code} is not affiliated with kitchen {review.kitchen_id}"
                )
            if review.is_draft:
                raise InvalidTransitionError(
                    "Dispute", review.dispute_status, DisputeStatus.DISPUTED, details={"reason": "draft"}
                )

            ensure_transition("Dispute", DISPUTE_TRANSITIONS, review.dispute_status, DisputeStatus.DISPUTED)

            now = self._now()
            review.dispute_status = DisputeStatus.DISPUTED
            review.updated_at = now
            self._get_history_repo(uow).append(
                review, DisputeAction.FILED, principal.user_id, principal.code, reason, now
            )

            uow.flush()
            logger.info(
                f"Dispute filed on review {review.id} by {principal.code}",
                extra={"review_id": review.id, "user_code": principal.code},
            )
            return to_review_detail(review)

    def advance_dispute(
        self,
        review_id: str,
        new_status: DisputeStatus,
        moderator: Principal,
        notes: Optional[str] = None,
        outcome: DisputeOutcome = DisputeOutcome.UPHELD,
    ) -> ReviewDetail:
        """
        Move a dispute one step forward.

        Resolving with ``outcome=upheld`` records ``Resolved`` and resolves the
        review's open notifications; ``outcome=rejected`` records ``Rejected``
        and leaves notifications untouched.

        Raises:
            ForbiddenError: If the moderator is not an administrator
            InvalidTransitionError: On any skip, backward or same-state move
        """
        require_admin(moderator, action="moderate disputes")
        try:
            new_status = DisputeStatus(new_status)
            outcome = DisputeOutcome(outcome)
        except ValueError as exc:
            raise ValidationError(str(exc), field="new_status") from exc

        with conflicts_on("Review", review_id), UnitOfWork(self._session_factory) as uow:
            review = self._get_review(uow, review_id)
            previous = review.dispute_status
            ensure_transition("Dispute", DISPUTE_TRANSITIONS, previous, new_status)

            now = self._now()
            action = _ADVANCE_ACTIONS[(new_status, outcome)]
            review.dispute_status = new_status
            review.updated_at = now
            self._get_history_repo(uow).append(
                review, action, moderator.user_id, moderator.code, notes, now
            )

            if action == DisputeAction.RESOLVED:
                resolved = self._dispatcher.resolve_for_review(uow, review.id, moderator)
                if resolved:
                    logger.info(
                        f"Resolved {len(resolved)} notification(s) for upheld dispute on review {review.id}",
                        extra={"review_id": review.id},
                    )

            uow.flush()
            logger.info(
                f"Dispute on review {review.id} {previous.value} -> {new_status.value} "
                f"({action.value}) by {moderator.code}",
                extra={"review_id": review.id, "user_code": moderator.code},
            )
            return to_review_detail(review)
