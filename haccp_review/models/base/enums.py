"""
Database enums shared by models and schemas.

Every string-typed status or category column is backed by one of these
closed enumerations.
"""

import enum


class ActorRole(str, enum.Enum):
    """Role carried by an authenticated principal."""
    ADMIN = "admin"
    KITCHEN = "kitchen"
    SUPPLIER = "supplier"
    SCHOOL = "school"
    CONSUMER = "consumer"


class ReviewerType(str, enum.Enum):
    """Kind of institution that authored a review."""
    CONSUMER = "consumer"
    SUPPLIER = "supplier"
    KITCHEN = "kitchen"


class HaccpCategory(str, enum.Enum):
    """The six HACCP rating dimensions."""
    TASTE = "taste"
    HYGIENE = "hygiene"
    FRESHNESS = "freshness"
    TEMPERATURE = "temperature"
    PACKAGING = "packaging"
    HANDLING = "handling"


class VerificationStatus(str, enum.Enum):
    """Moderation progress of a review."""
    UNVERIFIED = "unverified"
    IN_PROGRESS = "in_progress"
    VERIFIED = "verified"


class ReportSource(str, enum.Enum):
    """Origin of a review report."""
    PUBLIC = "public"
    OFFICIAL_INSPECTOR = "official_inspector"
    HEALTH_WORKER = "health_worker"


class ConfidenceLevel(str, enum.Enum):
    """Reporter confidence in the observation."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RootCause(str, enum.Enum):
    """Identified food-safety root cause."""
    TEMPERATURE_STORAGE = "temperature_storage"
    CROSS_CONTAMINATION = "cross_contamination"
    EQUIPMENT_SANITATION = "equipment_sanitation"
    WORKER_HYGIENE = "worker_hygiene"
    SUPPLY_CHAIN = "supply_chain"


class DisputeStatus(str, enum.Enum):
    """Dispute progress of a review."""
    NONE = "none"
    DISPUTED = "disputed"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"


class DisputeAction(str, enum.Enum):
    """Action recorded in the dispute history."""
    FILED = "Filed"
    UNDER_REVIEW = "UnderReview"
    RESOLVED = "Resolved"
    REJECTED = "Rejected"


class DisputeOutcome(str, enum.Enum):
    """How a moderator closes a dispute."""
    UPHELD = "upheld"
    REJECTED = "rejected"


class NotificationPriority(str, enum.Enum):
    """Notification urgency."""
    CRITICAL = "critical"
    MEDIUM = "medium"
    MINOR = "minor"


class NotificationStatus(str, enum.Enum):
    """Notification handling status."""
    NEW = "new"
    VIEWED = "viewed"
    RESOLVED = "resolved"


class TargetRole(str, enum.Enum):
    """Audience a notification is addressed to."""
    ALL = "all"
    KITCHEN = "kitchen"
    SUPPLIER = "supplier"
    CONSUMER = "consumer"


class NotificationAuditAction(str, enum.Enum):
    """Action recorded in the notification audit trail."""
    CREATED = "Created"
    VIEWED = "Viewed"
    RESOLVED = "Resolved"


class BadgeType(str, enum.Enum):
    """Kind of kitchen performance badge."""
    GOLD = "gold"
    SILVER = "silver"
    IMPROVEMENT = "improvement"


class IncidentType(str, enum.Enum):
    """Food-safety incident classification."""
    POISONING = "poisoning"
    NUTRITION = "nutrition"
    SANITATION = "sanitation"
    OTHER = "other"


class IncidentSeverity(str, enum.Enum):
    """Incident severity."""
    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"
