"""
Custom Exceptions for the HACCP review engine

Persistence-level exceptions raised by repositories. Services translate
these into the errors in ``haccp_review.services.common.errors``.
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Authorization
    FORBIDDEN = "FORBIDDEN"

    # State machine errors
    INVALID_TRANSITION = "INVALID_TRANSITION"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"
    IMMUTABLE_RECORD = "IMMUTABLE_RECORD"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# Repository Exceptions
# ========================================

class RepositoryError(BaseAppException):
    """Exception raised when a repository operation fails"""

    def __init__(
        self,
        message: str = "Database operation failed",
        operation: Optional[str] = None,
        table: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
    ):
        details = {
            "operation": operation,
            "table": table
        }
        super().__init__(message, error_code, details)


class EntityNotFoundError(RepositoryError):
    """Exception raised when a row looked up by primary key does not exist"""

    def __init__(self, entity: str, identifier: Any):
        super().__init__(
            f"{entity} with id '{identifier}' not found",
            operation="get",
            table=entity,
            error_code=ErrorCode.RESOURCE_NOT_FOUND,
        )
        self.entity = entity
        self.identifier = identifier


class OptimisticLockError(RepositoryError):
    """Exception raised when a versioned row changed underneath the caller"""

    def __init__(self, entity: str, identifier: Any, expected_version: Optional[int] = None):
        super().__init__(
            f"{entity} with id '{identifier}' was modified concurrently",
            operation="update",
            table=entity,
            error_code=ErrorCode.CONCURRENT_MODIFICATION,
        )
        self.entity = entity
        self.identifier = identifier
        self.details["expected_version"] = expected_version


class ImmutableRecordError(RepositoryError):
    """Exception raised on an attempt to modify an append-only record"""

    def __init__(self, table: str):
        super().__init__(
            f"Rows in '{table}' are append-only",
            operation="update",
            table=table,
            error_code=ErrorCode.IMMUTABLE_RECORD,
        )
