# haccp_review/services/common/pagination.py
"""
Pagination utilities for service layer.
"""
from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from haccp_review.schemas.common.base import BaseSchema
from haccp_review.schemas.common.pagination import PaginatedResponse, PaginationParams

TModel = TypeVar("TModel")
TSchema = TypeVar("TSchema", bound=BaseSchema)


def paginate(
    *,
    items: Sequence[TModel],
    total_items: int,
    params: PaginationParams,
    mapper: Callable[[TModel], TSchema],
) -> PaginatedResponse[TSchema]:
    """
    Build a paginated response from models.

    Example:
        >>> response = paginate(
        ...     items=reviews,
        ...     total_items=total,
        ...     params=pagination_params,
        ...     mapper=self._to_response,
        ... )
    """
    return PaginatedResponse[TSchema].create(
        items=[mapper(item) for item in items],
        total_items=total_items,
        page=params.page,
        page_size=params.page_size,
    )
