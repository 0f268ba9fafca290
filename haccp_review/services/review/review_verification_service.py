# haccp_review/services/review/review_verification_service.py
"""
Review moderation: forward-only verification and rejection.

Reaching ``verified`` hands the review to the notification dispatcher in
the same unit of work, so the status change and any notification commit
together.
"""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from haccp_review.config.logging import get_logger
from haccp_review.config.settings import Settings, get_settings
from haccp_review.models.base import VerificationStatus
from haccp_review.models.review import Review
from haccp_review.repositories.review import ReviewRepository
from haccp_review.schemas.review import ReviewDetail, ReviewResponse
from haccp_review.services.common import (
    ConcurrentModificationError,
    InvalidTransitionError,
    NotFoundError,
    Principal,
    UnitOfWork,
    ValidationError,
    conflicts_on,
    require_admin,
)
from haccp_review.services.common.state_machine import (
    VERIFICATION_TRANSITIONS,
    ensure_transition,
)
from haccp_review.services.notification.notification_dispatcher import NotificationDispatcher
from haccp_review.utils.datetime_utils import utcnow

from .review_mapping import to_review_detail, to_review_response

logger = get_logger(__name__)


class ReviewVerificationService:
    """
    Moves reviews through unverified -> in_progress -> verified.
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
        review = uow.get_repo(ReviewRepository).find_by_id(review_id)
        if review is None:
            raise NotFoundError("Review", review_id)
        return review

    def set_verification_status(
        self,
        review_id: str,
        new_status: VerificationStatus,
        moderator: Principal,
        expected_version: Optional[int] = None,
    ) -> ReviewResponse:
        """
        Advance a review's verification status.

        Raises:
            ForbiddenError: If the moderator is not an administrator
            InvalidTransitionError: On a same-state or backward move
            ConcurrentModificationError: If ``expected_version`` is stale or
                another moderator committed first
        """
        require_admin(moderator, action="moderate reviews")
        try:
            new_status = VerificationStatus(new_status)
        except ValueError as exc:
            raise ValidationError(f"Unknown verification status '{new_status}'", field="status") from exc

        with conflicts_on("Review", review_id), UnitOfWork(self._session_factory) as uow:
            review = self._get_review(uow, review_id)
            if expected_version is not None and review.version != expected_version:
                raise ConcurrentModificationError(
                    "Review",
                    review_id,
                    details={"expected_version": expected_version, "actual_version": review.version},
                )
            if review.is_draft:
                raise InvalidTransitionError(
                    "Review", review.verification_status, new_status, details={"reason": "draft"}
                )

            previous = review.verification_status
            ensure_transition("Review", VERIFICATION_TRANSITIONS, previous, new_status)

            now = self._now()
            review.verification_status = new_status
            review.updated_at = now
            if new_status == VerificationStatus.VERIFIED:
                review.verified_by = moderator.code
                review.verified_at = now
                self._dispatcher.on_review_verified(uow, review, moderator)

            uow.flush()
            logger.info(
                f"Review {review.id} verification {previous.value} -> {new_status.value} by {moderator.code}",
                extra={"review_id": review.id, "user_code": moderator.code},
            )
            return to_review_response(review)

    def reject_review(self, review_id: str, moderator: Principal, note: str) -> ReviewDetail:
        """
        Annotate an unverified review as rejected; it stays unverified.

        Raises:
            InvalidTransitionError: If moderation has already started
        """
        require_admin(moderator, action="reject reviews")
        note = (note or "").strip()
        if not note:
            raise ValidationError("A rejection note is required", field="note")

        with conflicts_on("Review", review_id), UnitOfWork(self._session_factory) as uow:
            review = self._get_review(uow, review_id)
            if review.verification_status != VerificationStatus.UNVERIFIED:
                raise InvalidTransitionError(
                    "Review",
                    review.verification_status,
                    "rejected",
                )

            now = self._now()
            review.rejection_note = note
            review.rejected_by = moderator.code
            review.rejected_at = now
            review.updated_at = now

            uow.flush()
            logger.info(
                f"Review {review.id} rejected by {moderator.code}",
                extra={"review_id": review.id, "user_code": moderator.code},
            )
            return to_review_detail(review)
