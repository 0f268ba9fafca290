# haccp_review/services/common/permissions.py
"""
Principal and role checks.

Identity is established upstream; the service layer only sees the
resulting ``Principal`` and checks roles and kitchen affiliations.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from haccp_review.models.base import ActorRole

from .errors import ForbiddenError


class PermissionDenied(ForbiddenError):
    """Raised when a principal lacks the role or affiliation an action needs."""

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        role: Optional[ActorRole] = None,
        required_role: Optional[str] = None,
    ) -> None:
        super().__init__(message, required_role=required_role)
        self.user_id = user_id
        self.role = role


@dataclass(frozen=True)
class Principal:
    """
    Represents an authenticated actor in the service layer.

    Attributes:
        user_id: Unique identifier for the user
        code: The user's unique public code
        role: The user's role
        kitchen_ids: Kitchens the user is affiliated with
    """
    user_id: str
    code: str
    role: ActorRole
    kitchen_ids: FrozenSet[str] = field(default_factory=frozenset)

    def has_any_role(self, roles: Iterable[ActorRole]) -> bool:
        return self.role in set(roles)

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    def is_affiliated_with(self, kitchen_id: str) -> bool:
        return kitchen_id in self.kitchen_ids


def require_role(
    principal: Principal,
    allowed_roles: Iterable[ActorRole],
    *,
    error_message: Optional[str] = None,
) -> None:
    """
    Assert that principal has one of the allowed roles.

    Raises:
        PermissionDenied: If principal lacks required role

    Example:
        >>> require_role(principal, [ActorRole.ADMIN])
    """
    allowed_roles = list(allowed_roles)
    if not principal.has_any_role(allowed_roles):
        roles_str = ", ".join(r.value for r in allowed_roles)
        msg = error_message or (
            f"User {principal.user_id} with role '{principal.role.value}' "
            f"does not have one of required roles: {roles_str}"
        )
        raise PermissionDenied(
            msg,
            user_id=principal.user_id,
            role=principal.role,
            required_role=roles_str,
        )


def require_admin(principal: Principal, *, action: str) -> None:
    require_role(
        principal,
        [ActorRole.ADMIN],
        error_message=f"Only administrators may {action}",
    )
