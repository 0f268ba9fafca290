# --- File: haccp_review/schemas/common/__init__.py ---
from haccp_review.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
    BaseUpdateSchema,
)
from haccp_review.schemas.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
)

__all__ = [
    "BaseSchema",
    "BaseCreateSchema",
    "BaseUpdateSchema",
    "BaseResponseSchema",
    "PaginationParams",
    "PaginationMeta",
    "PaginatedResponse",
]
