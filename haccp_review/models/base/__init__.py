"""
Base models package.

Provides the declarative base, mixins, column types and enums for all
database models.
"""

from haccp_review.models.base.base_model import Base, BaseModel, generate_uuid
from haccp_review.models.base.mixins import AppendOnlyMixin, TimestampMixin
from haccp_review.models.base.types import JSONType, enum_column
from haccp_review.models.base.enums import (
    ActorRole,
    BadgeType,
    ConfidenceLevel,
    DisputeAction,
    DisputeOutcome,
    DisputeStatus,
    HaccpCategory,
    IncidentSeverity,
    IncidentType,
    NotificationAuditAction,
    NotificationPriority,
    NotificationStatus,
    ReportSource,
    ReviewerType,
    RootCause,
    TargetRole,
    VerificationStatus,
)

__all__ = [
    "Base",
    "BaseModel",
    "generate_uuid",
    "AppendOnlyMixin",
    "TimestampMixin",
    "JSONType",
    "enum_column",
    "ActorRole",
    "BadgeType",
    "ConfidenceLevel",
    "DisputeAction",
    "DisputeOutcome",
    "DisputeStatus",
    "HaccpCategory",
    "IncidentSeverity",
    "IncidentType",
    "NotificationAuditAction",
    "NotificationPriority",
    "NotificationStatus",
    "ReportSource",
    "ReviewerType",
    "RootCause",
    "TargetRole",
    "VerificationStatus",
]
