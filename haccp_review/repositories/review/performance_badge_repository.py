"""
Performance badge repository.
"""

from typing import List

from sqlalchemy.orm import Session

from haccp_review.models.review import PerformanceBadge
from haccp_review.repositories.base import BaseRepository


class PerformanceBadgeRepository(BaseRepository[PerformanceBadge]):

    def __init__(self, session: Session):
        super().__init__(PerformanceBadge, session)

    def list_for_kitchen(self, kitchen_id: str) -> List[PerformanceBadge]:
        """Badges of a kitchen, most recently earned first."""
        return self.find_by_criteria(
            {"kitchen_id": kitchen_id},
            limit=None,
            order_by=["-earned_date", "-created_at"],
        )
