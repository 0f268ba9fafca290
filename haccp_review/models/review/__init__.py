from haccp_review.models.review.review import RATING_COLUMNS, DisputeHistoryEntry, Review
from haccp_review.models.review.performance_badge import PerformanceBadge

__all__ = ["RATING_COLUMNS", "Review", "DisputeHistoryEntry", "PerformanceBadge"]
