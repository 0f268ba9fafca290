"""
Kitchen and incident records.

Both tables are owned by the kitchen registry; this engine keeps a
minimal mirror for name/code lookups and incident counts.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text

from haccp_review.models.base import (
    BaseModel,
    IncidentSeverity,
    IncidentType,
    TimestampMixin,
    enum_column,
)

__all__ = ["Kitchen", "Incident", "format_location"]


def format_location(city, province) -> str:
    """Display string built from city and province."""
    return ", ".join(part for part in (city, province) if part)


class Kitchen(BaseModel, TimestampMixin):
    """Central kitchen serving school meal programs."""

    __tablename__ = "kitchens"

    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=False, unique=True, index=True)
    city = Column(String(100), nullable=True)
    province = Column(String(100), nullable=True)
    owner_id = Column(String(36), nullable=True, index=True)

    @property
    def location(self) -> str:
        return format_location(self.city, self.province)

    def __repr__(self) -> str:
        return f"<Kitchen(id={self.id}, code={self.code})>"


class Incident(BaseModel, TimestampMixin):
    """Food-safety incident attributed to a kitchen."""

    __tablename__ = "incidents"

    kitchen_id = Column(
        String(36),
        ForeignKey("kitchens.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(DateTime, nullable=False)
    type = Column(enum_column(IncidentType, 20), nullable=False)
    severity = Column(enum_column(IncidentSeverity, 10), nullable=False)
    description = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_incident_kitchen_date", "kitchen_id", "date"),
    )

    def __repr__(self) -> str:
        return f"<Incident(kitchen_id={self.kitchen_id}, date={self.date}, severity={self.severity})>"
