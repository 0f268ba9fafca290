# haccp_review/services/common/state_machine.py
"""
Transition tables for review verification, review disputes and
notification status.

Every table lists each member of its enum, so an unknown state fails at
import rather than slipping through a lookup.
"""
from __future__ import annotations

from typing import Dict, FrozenSet, Mapping, Type, TypeVar
import enum

from haccp_review.models.base import DisputeStatus, NotificationStatus, VerificationStatus
from .errors import InvalidTransitionError

TState = TypeVar("TState", bound=enum.Enum)

# Moderation may skip ahead (e.g. straight to verified) but never go back.
VERIFICATION_TRANSITIONS: Dict[VerificationStatus, FrozenSet[VerificationStatus]] = {
    VerificationStatus.UNVERIFIED: frozenset(
        {VerificationStatus.IN_PROGRESS, VerificationStatus.VERIFIED}
    ),
    VerificationStatus.IN_PROGRESS: frozenset({VerificationStatus.VERIFIED}),
    VerificationStatus.VERIFIED: frozenset(),
}

DISPUTE_TRANSITIONS: Dict[DisputeStatus, FrozenSet[DisputeStatus]] = {
    DisputeStatus.NONE: frozenset({DisputeStatus.DISPUTED}),
    DisputeStatus.DISPUTED: frozenset({DisputeStatus.UNDER_REVIEW}),
    DisputeStatus.UNDER_REVIEW: frozenset({DisputeStatus.RESOLVED}),
    DisputeStatus.RESOLVED: frozenset(),
}

NOTIFICATION_TRANSITIONS: Dict[NotificationStatus, FrozenSet[NotificationStatus]] = {
    NotificationStatus.NEW: frozenset({NotificationStatus.VIEWED, NotificationStatus.RESOLVED}),
    NotificationStatus.VIEWED: frozenset({NotificationStatus.RESOLVED}),
    NotificationStatus.RESOLVED: frozenset(),
}


def _check_complete(table: Mapping[TState, FrozenSet[TState]], enum_cls: Type[TState]) -> None:
    missing = set(enum_cls) - set(table)
    if missing:
        raise RuntimeError(f"Transition table for {enum_cls.__name__} misses {sorted(m.value for m in missing)}")


_check_complete(VERIFICATION_TRANSITIONS, VerificationStatus)
_check_complete(DISPUTE_TRANSITIONS, DisputeStatus)
_check_complete(NOTIFICATION_TRANSITIONS, NotificationStatus)


def can_transition(
    table: Mapping[TState, FrozenSet[TState]],
    current: TState,
    target: TState,
) -> bool:
    return target in table[current]


def ensure_transition(
    entity: str,
    table: Mapping[TState, FrozenSet[TState]],
    current: TState,
    target: TState,
) -> None:
    """
    Raises:
        InvalidTransitionError: If ``target`` is not reachable from ``current`` in one step
    """
    if not can_transition(table, current, target):
        raise InvalidTransitionError(entity, current, target)
