# haccp_review/services/notification/notification_rules.py
"""
Pure rules deciding whether a verified review raises a notification and
what that notification looks like.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import AbstractSet, Iterable, Mapping, Optional

from haccp_review.models.base import (
    ActorRole,
    ConfidenceLevel,
    HaccpCategory,
    NotificationPriority,
    ReportSource,
    ReviewerType,
    RootCause,
    TargetRole,
)
from haccp_review.services.common.permissions import Principal

# Earlier entries win when several dimensions share the lowest rating
CATEGORY_TIE_BREAK = (
    HaccpCategory.TEMPERATURE,
    HaccpCategory.HYGIENE,
    HaccpCategory.HANDLING,
    HaccpCategory.FRESHNESS,
    HaccpCategory.PACKAGING,
    HaccpCategory.TASTE,
)

CATEGORY_LABELS = {
    HaccpCategory.TASTE: "Taste",
    HaccpCategory.HYGIENE: "Hygiene",
    HaccpCategory.FRESHNESS: "Freshness",
    HaccpCategory.TEMPERATURE: "Temperature control",
    HaccpCategory.PACKAGING: "Packaging",
    HaccpCategory.HANDLING: "Food handling",
}


@dataclass(frozen=True)
class DispatchRules:
    """Configurable thresholds for notification dispatch."""

    rating_threshold: Decimal = Decimal("3.5")
    critical_threshold: Decimal = Decimal("2.0")
    critical_root_causes: AbstractSet[RootCause] = frozenset(
        {RootCause.TEMPERATURE_STORAGE, RootCause.CROSS_CONTAMINATION}
    )

    @classmethod
    def from_settings(cls, settings) -> "DispatchRules":
        return cls(
            rating_threshold=Decimal(settings.NOTIFICATION_RATING_THRESHOLD),
            critical_threshold=Decimal(settings.CRITICAL_RATING_THRESHOLD),
            critical_root_causes=frozenset(
                RootCause(value) for value in settings.CRITICAL_ROOT_CAUSES
            ),
        )


def should_notify(
    ratings: Mapping[HaccpCategory, Decimal],
    root_causes: Iterable[RootCause],
    rules: DispatchRules,
) -> bool:
    """A notification is due when any rating is below threshold or a root cause was reported."""
    if any(rating < rules.rating_threshold for rating in ratings.values()):
        return True
    return bool(list(root_causes))


def lowest_category(ratings: Mapping[HaccpCategory, Decimal]) -> HaccpCategory:
    return min(
        CATEGORY_TIE_BREAK,
        key=lambda category: (ratings[category], CATEGORY_TIE_BREAK.index(category)),
    )


def derive_priority(
    ratings: Mapping[HaccpCategory, Decimal],
    confidence: ConfidenceLevel,
    root_causes: Iterable[RootCause],
    rules: DispatchRules,
) -> NotificationPriority:
    lowest = min(ratings.values())
    if lowest < rules.critical_threshold:
        return NotificationPriority.CRITICAL
    if confidence == ConfidenceLevel.HIGH and set(root_causes) & set(rules.critical_root_causes):
        return NotificationPriority.CRITICAL
    if lowest < rules.rating_threshold:
        return NotificationPriority.MEDIUM
    return NotificationPriority.MINOR


def derive_target_role(report_source: ReportSource) -> TargetRole:
    if report_source == ReportSource.OFFICIAL_INSPECTOR:
        return TargetRole.ALL
    return TargetRole.KITCHEN


def school_code_for(reviewer_type: ReviewerType, reviewer_code: str) -> Optional[str]:
    """Consumer reviews are filed on behalf of a school; its code addresses the notification."""
    if reviewer_type == ReviewerType.CONSUMER:
        return reviewer_code
    return None


def build_title(category: HaccpCategory, priority: NotificationPriority, kitchen_name: str) -> str:
    return f"[{priority.value.upper()}] {CATEGORY_LABELS[category]} issue at {kitchen_name}"


def build_description(
    category: HaccpCategory,
    rating: Decimal,
    root_causes: Iterable[RootCause],
    comment: str,
) -> str:
    lines = [f"{CATEGORY_LABELS[category]} rated {rating} out of 5 in a verified review."]
    causes = [cause.value.replace("_", " ") for cause in root_causes]
    if causes:
        lines.append(f"Reported root causes: {', '.join(causes)}.")
    lines.append(f"Reviewer comment: {comment}")
    return "\n".join(lines)


def is_visible_to(
    principal: Principal,
    *,
    target_role: TargetRole,
    created_by: str,
    school_code: Optional[str],
) -> bool:
    """Single-notification form of ``NotificationRepository.visible_to``."""
    if principal.role == ActorRole.ADMIN:
        return True
    if principal.role in (ActorRole.SCHOOL, ActorRole.CONSUMER):
        return principal.code in (created_by, school_code)
    return target_role in (TargetRole.ALL, TargetRole(principal.role.value))
