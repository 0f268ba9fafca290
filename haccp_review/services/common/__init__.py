"""
Shared service-layer building blocks.
"""

from .errors import (
    ConcurrentModificationError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ServiceError,
    TransactionError,
    ValidationError,
)
from .permissions import PermissionDenied, Principal, require_admin, require_role
from .unit_of_work import UnitOfWork, conflicts_on

__all__ = [
    "ServiceError",
    "NotFoundError",
    "ValidationError",
    "ForbiddenError",
    "InvalidTransitionError",
    "ConcurrentModificationError",
    "TransactionError",
    "PermissionDenied",
    "Principal",
    "require_admin",
    "require_role",
    "UnitOfWork",
    "conflicts_on",
]
