"""
Review lifecycle services.
"""

from .review_service import ReviewService, default_confidence
from .review_verification_service import ReviewVerificationService
from .review_dispute_service import ReviewDisputeService
from .performance_badge_service import PerformanceBadgeService

__all__ = [
    "ReviewService",
    "ReviewVerificationService",
    "ReviewDisputeService",
    "PerformanceBadgeService",
    "default_confidence",
]
