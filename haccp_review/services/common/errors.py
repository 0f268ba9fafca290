# haccp_review/services/common/errors.py
"""
Service-layer exceptions.

These exceptions are raised by service methods and should be caught
at the API layer to return appropriate HTTP responses.
"""
from __future__ import annotations

from typing import Any, Optional


class ServiceError(Exception):
    """Base exception for all service-layer errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(ServiceError):
    """Raised when a requested resource does not exist."""

    def __init__(
        self,
        resource_type: str,
        identifier: str | int,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} with identifier '{identifier}' not found"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.identifier = identifier


class ValidationError(ServiceError):
    """Raised when input fails validation."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field


class ForbiddenError(ServiceError):
    """Raised when the principal may not perform an action."""

    def __init__(
        self,
        message: str = "Operation not permitted",
        required_role: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.required_role = required_role


class InvalidTransitionError(ServiceError):
    """Raised when a state machine move is not allowed from the current state."""

    def __init__(
        self,
        entity: str,
        from_state: Any,
        to_state: Any,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        from_value = getattr(from_state, "value", from_state)
        to_value = getattr(to_state, "value", to_state)
        message = f"{entity} cannot move from '{from_value}' to '{to_value}'"
        super().__init__(
            message,
            {"from_state": from_value, "to_state": to_value, **(details or {})},
        )
        self.entity = entity
        self.from_state = from_state
        self.to_state = to_state


class ConcurrentModificationError(ServiceError):
    """Raised when another writer changed the entity first."""

    def __init__(
        self,
        resource_type: str,
        identifier: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        if identifier is None:
            message = f"{resource_type} was modified concurrently"
        else:
            message = f"{resource_type} with identifier '{identifier}' was modified concurrently"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.identifier = identifier


class TransactionError(ServiceError):
    """Raised when a database transaction fails; the caller may retry."""

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message, details={"error_type": type(original_error).__name__})
        self.original_error = original_error
