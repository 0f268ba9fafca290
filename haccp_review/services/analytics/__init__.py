from .compliance_trend_service import ComplianceTrendSeries, ComplianceTrendService

__all__ = ["ComplianceTrendSeries", "ComplianceTrendService"]
