# --- File: haccp_review/schemas/analytics/__init__.py ---
from haccp_review.schemas.analytics.compliance_trend import (
    ComplianceTrendPoint,
    ComplianceTrendResponse,
)

__all__ = ["ComplianceTrendPoint", "ComplianceTrendResponse"]
