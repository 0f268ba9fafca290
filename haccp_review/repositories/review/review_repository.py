"""
Review Repository - review CRUD and query operations.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import asc, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from haccp_review.core.exceptions import RepositoryError
from haccp_review.models.base import DisputeAction, ReviewerType
from haccp_review.models.review import RATING_COLUMNS, DisputeHistoryEntry, Review
from haccp_review.repositories.base import BaseRepository

# Sortable fields exposed to listing callers
SORT_COLUMNS = {
    "created_at": Review.created_at,
    "average_rating": Review.average_rating,
}


class ReviewRepository(BaseRepository[Review]):
    """
    Repository for Review entity operations.
    """

    def __init__(self, session: Session):
        super().__init__(Review, session)

    def get_with_history(self, review_id: str) -> Optional[Review]:
        """Load a review together with its dispute history."""
        try:
            return (
                self.query()
                .options(selectinload(Review.dispute_history))
                .filter(Review.id == review_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find review failed: {str(e)}", operation="select") from e

    def find_by_kitchen(
        self,
        kitchen_id: str,
        *,
        verified: Optional[bool] = None,
        min_rating: Optional[Decimal] = None,
        reviewer_type: Optional[ReviewerType] = None,
        include_drafts: bool = False,
        sort: str = "created_at",
        order: str = "desc",
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Review], int]:
        """
        Filtered, sorted page of a kitchen's reviews.

        Returns:
            The page of reviews and the total number of matches
        """
        query = self.query().filter(Review.kitchen_id == kitchen_id)
        if verified is not None:
            query = query.filter(Review.verified == verified)
        if min_rating is not None:
            query = query.filter(Review.average_rating >= float(min_rating))
        if reviewer_type is not None:
            query = query.filter(Review.reviewer_type == reviewer_type)
        if not include_drafts:
            query = query.filter(Review.is_draft.is_(False))

        direction = desc if order == "desc" else asc
        query = query.order_by(direction(SORT_COLUMNS[sort]), direction(Review.id))

        try:
            total = query.order_by(None).count()
            items = query.offset(offset).limit(limit).all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by kitchen failed: {str(e)}", operation="select") from e
        return items, total

    def verified_ratings_between(
        self,
        kitchen_id: str,
        start: datetime,
        end: datetime,
    ) -> List[tuple]:
        """
        ``(created_at, rating, ...)`` rows of verified reviews created in ``[start, end)``.

        Each row carries all six ratings of one review.
        """
        columns = [getattr(Review, name) for name in RATING_COLUMNS.values()]
        try:
            return (
                self.db.query(Review.created_at, *columns)
                .filter(
                    Review.kitchen_id == kitchen_id,
                    Review.verified.is_(True),
                    Review.created_at >= start,
                    Review.created_at < end,
                )
                .all()
            )
        except SQLAlchemyError as e:
            raise RepositoryError(f"Rating window query failed: {str(e)}", operation="select") from e


class DisputeHistoryRepository(BaseRepository[DisputeHistoryEntry]):
    """Append-only access to ``review_dispute_history``."""

    def __init__(self, session: Session):
        super().__init__(DisputeHistoryEntry, session)

    def append(
        self,
        review: Review,
        action: DisputeAction,
        by_user_id: str,
        by_user_code: str,
        notes: Optional[str],
        timestamp: datetime,
    ) -> DisputeHistoryEntry:
        entry = DisputeHistoryEntry(
            review_id=review.id,
            action=action,
            by_user_id=by_user_id,
            by_user_code=by_user_code,
            notes=notes,
            timestamp=timestamp,
        )
        review.dispute_history.append(entry)
        return self.create(entry)

    def list_for_review(self, review_id: str) -> List[DisputeHistoryEntry]:
        return self.find_by_criteria(
            {"review_id": review_id}, limit=None, order_by=["timestamp"]
        )
