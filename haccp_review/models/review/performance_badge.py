"""
Performance badges awarded to kitchens.
"""

from sqlalchemy import Column, Date, ForeignKey, Index, String, Text

from haccp_review.models.base import BaseModel, BadgeType, TimestampMixin, enum_column

__all__ = ["PerformanceBadge"]


class PerformanceBadge(BaseModel, TimestampMixin):
    """Badge recognising a kitchen's compliance performance."""

    __tablename__ = "performance_badges"

    kitchen_id = Column(
        String(36),
        ForeignKey("kitchens.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type = Column(enum_column(BadgeType, 20), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    earned_date = Column(Date, nullable=False)
    awarded_by = Column(String(50), nullable=True)

    __table_args__ = (
        Index("idx_badge_kitchen_earned", "kitchen_id", "earned_date"),
    )

    def __repr__(self) -> str:
        return f"<PerformanceBadge(kitchen_id={self.kitchen_id}, type={self.type})>"
