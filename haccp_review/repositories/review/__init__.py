from haccp_review.repositories.review.review_repository import (
    DisputeHistoryRepository,
    ReviewRepository,
)
from haccp_review.repositories.review.performance_badge_repository import (
    PerformanceBadgeRepository,
)

__all__ = ["ReviewRepository", "DisputeHistoryRepository", "PerformanceBadgeRepository"]
