# haccp_review/services/review/review_service.py
"""
Review authoring and read operations.

- Submit, update and delete reviews (authors only, until verified).
- Read a review with its dispute history.
- List a kitchen's reviews, publicly (verified only) or with filters.
- Submit reviews in batch with per-item outcomes.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from sqlalchemy.orm import Session

from haccp_review.config.logging import get_logger
from haccp_review.config.settings import Settings, get_settings
from haccp_review.models.base import (
    ConfidenceLevel,
    DisputeStatus,
    ReportSource,
    VerificationStatus,
)
from haccp_review.models.review import RATING_COLUMNS, Review
from haccp_review.repositories.kitchen import KitchenRepository
from haccp_review.repositories.review import DisputeHistoryRepository, ReviewRepository
from haccp_review.schemas.common.pagination import PaginatedResponse, PaginationParams
from haccp_review.schemas.review import (
    BatchReviewResponse,
    BatchReviewResult,
    DisputeHistoryEntryResponse,
    HaccpRatings,
    PublicReviewResponse,
    ReviewCreate,
    ReviewDetail,
    ReviewFilterParams,
    ReviewResponse,
    ReviewUpdate,
)
from haccp_review.services.common import (
    ForbiddenError,
    NotFoundError,
    Principal,
    ServiceError,
    UnitOfWork,
    ValidationError,
    conflicts_on,
)
from haccp_review.services.common.mapping import coerce_input
from haccp_review.services.common.pagination import paginate
from haccp_review.utils.datetime_utils import utcnow

from .review_mapping import to_public_review, to_review_detail, to_review_response

logger = get_logger(__name__)

MAX_BATCH_SIZE = 50

# Fields an update may not set to null
_NON_NULLABLE_UPDATE_FIELDS = ("ratings", "comment", "photos", "root_causes", "is_draft")


def default_confidence(report_source: ReportSource) -> ConfidenceLevel:
    """Official and health-worker reports are trusted more than public ones."""
    if report_source == ReportSource.PUBLIC:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.HIGH


def _apply_ratings(review: Review, ratings: HaccpRatings) -> None:
    for category, column in RATING_COLUMNS.items():
        setattr(review, column, getattr(ratings, category.value))


class ReviewService:
    """
    Author-facing review operations.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or get_settings()
        self._clock = clock or utcnow

    def _now(self) -> datetime:
        return self._clock()

    def _get_repo(self, uow: UnitOfWork) -> ReviewRepository:
        return uow.get_repo(ReviewRepository)

    def _get_review(self, uow: UnitOfWork, review_id: str) -> Review:
        review = self._get_repo(uow).find_by_id(review_id)
        if review is None:
            raise NotFoundError("Review", review_id)
        return review

    def _ensure_kitchen(self, uow: UnitOfWork, kitchen_id: str) -> None:
        if uow.get_repo(KitchenRepository).find_by_id(kitchen_id) is None:
            raise NotFoundError("Kitchen", kitchen_id)

    @staticmethod
    def _ensure_author_may_modify(review: Review, principal: Principal, action: str) -> None:
        if review.reviewer_id != principal.user_id:
            raise ForbiddenError(f"Only the author may {action} review {review.id}")
        if review.verified:
            raise ForbiddenError(f"Review {review.id} is verified and can no longer be {action}d")

    @staticmethod
    def _ensure_visible(review: Review, principal: Principal) -> None:
        if review.is_draft and not (principal.is_admin or review.reviewer_id == principal.user_id):
            raise ForbiddenError(f"Review {review.id} is a draft")

    # ------------------------------------------------------------------ #
    # Authoring
    # ------------------------------------------------------------------ #

    def submit_review(
        self,
        data: Union[ReviewCreate, Mapping[str, Any]],
        principal: Principal,
    ) -> ReviewResponse:
        """
        Create an unverified, undisputed review authored by ``principal``.

        Raises:
            ValidationError: If ratings, comment, photos or enum fields are invalid
            NotFoundError: If the kitchen does not exist
        """
        payload = coerce_input(data, ReviewCreate)

        with UnitOfWork(self._session_factory) as uow:
            self._ensure_kitchen(uow, payload.kitchen_id)
            now = self._now()

            review = Review(
                kitchen_id=payload.kitchen_id,
                reviewer_id=principal.user_id,
                reviewer_code=principal.code,
                reviewer_name=payload.reviewer_name,
                reviewer_type=payload.reviewer_type,
                comment=payload.comment,
                photos=list(payload.photos),
                verification_status=VerificationStatus.UNVERIFIED,
                report_source=payload.report_source,
                confidence_level=payload.confidence_level or default_confidence(payload.report_source),
                root_causes=[cause.value for cause in payload.root_causes],
                evidence=payload.evidence.model_dump(mode="json") if payload.evidence else None,
                dispute_status=DisputeStatus.NONE,
                is_draft=payload.is_draft,
                created_at=now,
                updated_at=now,
            )
            _apply_ratings(review, payload.ratings)
            self._get_repo(uow).create(review)

            logger.info(
                f"Review {review.id} submitted for kitchen {review.kitchen_id} by {principal.code}",
                extra={"review_id": review.id, "kitchen_id": review.kitchen_id},
            )
            return to_review_response(review)

    def update_review(
        self,
        review_id: str,
        patch: Union[ReviewUpdate, Mapping[str, Any]],
        principal: Principal,
    ) -> ReviewResponse:
        """
        Replace content fields of an unverified review.

        Raises:
            ValidationError: If the patch is invalid or names identity fields
            ForbiddenError: If the caller is not the author or the review is verified
        """
        patch = coerce_input(patch, ReviewUpdate)
        provided = patch.model_fields_set

        for field in _NON_NULLABLE_UPDATE_FIELDS:
            if field in provided and getattr(patch, field) is None:
                raise ValidationError(f"'{field}' cannot be null", field=field)

        with conflicts_on("Review", review_id), UnitOfWork(self._session_factory) as uow:
            review = self._get_review(uow, review_id)
            self._ensure_author_may_modify(review, principal, "update")

            if "ratings" in provided:
                _apply_ratings(review, patch.ratings)
            if "comment" in provided:
                review.comment = patch.comment
            if "photos" in provided:
                review.photos = list(patch.photos)
            if "root_causes" in provided:
                review.root_causes = [cause.value for cause in patch.root_causes]
            if "evidence" in provided:
                review.evidence = patch.evidence.model_dump(mode="json") if patch.evidence else None
            if "is_draft" in provided:
                review.is_draft = patch.is_draft
            review.updated_at = self._now()

            uow.flush()
            logger.info(
                f"Review {review.id} updated ({', '.join(sorted(provided)) or 'no fields'})",
                extra={"review_id": review.id},
            )
            return to_review_response(review)

    def delete_review(self, review_id: str, principal: Principal) -> None:
        """
        Hard-delete an unverified review and its dispute history.

        Raises:
            ForbiddenError: If the caller is not the author or the review is verified
        """
        with conflicts_on("Review", review_id), UnitOfWork(self._session_factory) as uow:
            review = self._get_review(uow, review_id)
            self._ensure_author_may_modify(review, principal, "delete")
            self._get_repo(uow).delete(review)

        logger.info(f"Review {review_id} deleted by {principal.code}", extra={"review_id": review_id})

    def submit_batch(
        self,
        items: Sequence[Union[ReviewCreate, Mapping[str, Any]]],
        principal: Principal,
    ) -> BatchReviewResponse:
        """
        Submit several reviews; each succeeds or fails on its own.
        """
        if not items:
            raise ValidationError("Batch must contain at least one review", field="reviews")
        if len(items) > MAX_BATCH_SIZE:
            raise ValidationError(
                f"Batch cannot exceed {MAX_BATCH_SIZE} reviews",
                field="reviews",
                details={"max": MAX_BATCH_SIZE, "received": len(items)},
            )

        results: List[BatchReviewResult] = []
        for index, item in enumerate(items):
            kitchen_id = item.kitchen_id if isinstance(item, ReviewCreate) else item.get("kitchen_id")
            try:
                review = self.submit_review(item, principal)
            except ServiceError as exc:
                logger.warning(f"Batch item {index} rejected: {exc.message}")
                results.append(
                    BatchReviewResult(index=index, kitchen_id=kitchen_id, status="failed", error=exc.message)
                )
            else:
                results.append(
                    BatchReviewResult(index=index, kitchen_id=kitchen_id, status="created", review_id=review.id)
                )

        created = sum(1 for r in results if r.status == "created")
        return BatchReviewResponse(created=created, failed=len(results) - created, results=results)

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get_review(self, review_id: str, principal: Principal) -> ReviewDetail:
        """Drafts are only visible to their author and administrators."""
        with UnitOfWork(self._session_factory) as uow:
            review = self._get_repo(uow).get_with_history(review_id)
            if review is None:
                raise NotFoundError("Review", review_id)
            self._ensure_visible(review, principal)
            return to_review_detail(review)

    def get_dispute_history(self, review_id: str, principal: Principal) -> List[DisputeHistoryEntryResponse]:
        """Same visibility as ``get_review``."""
        with UnitOfWork(self._session_factory) as uow:
            self._ensure_visible(self._get_review(uow, review_id), principal)
            entries = uow.get_repo(DisputeHistoryRepository).list_for_review(review_id)
            return [DisputeHistoryEntryResponse.model_validate(e) for e in entries]

    def list_kitchen_reviews(
        self,
        kitchen_id: str,
        filters: Optional[ReviewFilterParams] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> PaginatedResponse[ReviewResponse]:
        filters = filters or ReviewFilterParams()
        pagination = pagination or PaginationParams()

        with UnitOfWork(self._session_factory) as uow:
            self._ensure_kitchen(uow, kitchen_id)
            items, total = self._get_repo(uow).find_by_kitchen(
                kitchen_id,
                verified=filters.verified,
                min_rating=filters.min_rating,
                reviewer_type=filters.reviewer_type,
                sort=filters.sort,
                order=filters.order,
                offset=pagination.offset,
                limit=pagination.limit,
            )
            return paginate(
                items=items,
                total_items=total,
                params=pagination,
                mapper=to_review_response,
            )

    def list_public_reviews(
        self,
        kitchen_id: str,
        pagination: Optional[PaginationParams] = None,
    ) -> PaginatedResponse[PublicReviewResponse]:
        """Verified reviews only, newest first."""
        pagination = pagination or PaginationParams()

        with UnitOfWork(self._session_factory) as uow:
            self._ensure_kitchen(uow, kitchen_id)
            items, total = self._get_repo(uow).find_by_kitchen(
                kitchen_id,
                verified=True,
                offset=pagination.offset,
                limit=pagination.limit,
            )
            return paginate(
                items=items,
                total_items=total,
                params=pagination,
                mapper=to_public_review,
            )
