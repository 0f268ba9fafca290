# --- File: haccp_review/schemas/review/badge.py ---
"""
Performance badge schemas.
"""

from datetime import date

from pydantic import Field

from haccp_review.models.base import BadgeType
from haccp_review.schemas.common.base import BaseCreateSchema, BaseResponseSchema

__all__ = ["BadgeCreate", "BadgeResponse"]


class BadgeCreate(BaseCreateSchema):
    type: BadgeType
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=2000)
    earned_date: date


class BadgeResponse(BaseResponseSchema):
    kitchen_id: str
    type: BadgeType
    title: str
    description: str
    earned_date: date
