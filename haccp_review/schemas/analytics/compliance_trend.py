# --- File: haccp_review/schemas/analytics/compliance_trend.py ---
"""
Compliance trend schemas.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import ConfigDict, Field

from haccp_review.schemas.common.base import BaseSchema

__all__ = ["ComplianceTrendPoint", "ComplianceTrendResponse"]


class ComplianceTrendPoint(BaseSchema):
    """
    One calendar month of a kitchen's compliance trend.

    ``score`` is ``None`` when the month has no verified review.
    """

    model_config = ConfigDict(frozen=True)

    kitchen_id: str
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="Calendar month, YYYY-MM")
    score: Optional[Decimal] = Field(default=None, description="Mean HACCP rating, one decimal")
    incident_count: int = Field(..., ge=0)
    review_count: int = Field(..., ge=0)


class ComplianceTrendResponse(BaseSchema):
    kitchen_id: str
    months: int
    points: List[ComplianceTrendPoint]
