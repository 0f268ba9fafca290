"""
Review models for HACCP review management.

A review carries six HACCP dimension ratings, moderation (verification)
state, dispute state and the append-only dispute history.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship, validates

from haccp_review.models.base import (
    AppendOnlyMixin,
    BaseModel,
    ConfidenceLevel,
    DisputeAction,
    DisputeStatus,
    HaccpCategory,
    JSONType,
    ReportSource,
    ReviewerType,
    TimestampMixin,
    VerificationStatus,
    enum_column,
)
from haccp_review.utils.datetime_utils import utcnow

__all__ = [
    "RATING_COLUMNS",
    "Review",
    "DisputeHistoryEntry",
]

# Column holding each dimension's rating
RATING_COLUMNS: Dict[HaccpCategory, str] = {
    category: f"{category.value}_rating" for category in HaccpCategory
}


def _rating_column(name: str) -> Column:
    return Column(
        Numeric(precision=2, scale=1, asdecimal=True),
        nullable=False,
        comment=f"{name.capitalize()} rating (0.0-5.0)",
    )


def _rating_range(column: str) -> CheckConstraint:
    return CheckConstraint(
        f"{column} >= 0 AND {column} <= 5",
        name=f"check_{column}_range",
    )


class Review(BaseModel, TimestampMixin):
    """
    HACCP review of a kitchen's meal program.

    ``verified`` mirrors ``verification_status == verified`` and is kept in
    sync on assignment. ``version`` is the optimistic-lock counter managed by
    the mapper.
    """

    __tablename__ = "reviews"

    kitchen_id = Column(
        String(36),
        ForeignKey("kitchens.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reviewer_id = Column(String(36), nullable=False, index=True)
    reviewer_code = Column(
        String(50),
        nullable=False,
        comment="Author's unique code at submission time",
    )
    reviewer_name = Column(String(255), nullable=False)
    reviewer_type = Column(enum_column(ReviewerType, 20), nullable=False)

    # HACCP ratings
    taste_rating = _rating_column("taste")
    hygiene_rating = _rating_column("hygiene")
    freshness_rating = _rating_column("freshness")
    temperature_rating = _rating_column("temperature")
    packaging_rating = _rating_column("packaging")
    handling_rating = _rating_column("handling")

    comment = Column(Text, nullable=False)
    photos = Column(JSONType, nullable=False, default=list)

    # Moderation
    verification_status = Column(
        enum_column(VerificationStatus, 20),
        nullable=False,
        default=VerificationStatus.UNVERIFIED,
        index=True,
    )
    verified = Column(Boolean, nullable=False, default=False, index=True)
    verified_by = Column(String(50), nullable=True)
    verified_at = Column(DateTime, nullable=True)

    rejection_note = Column(Text, nullable=True)
    rejected_by = Column(String(50), nullable=True)
    rejected_at = Column(DateTime, nullable=True)

    # Report provenance
    report_source = Column(
        enum_column(ReportSource, 30),
        nullable=False,
        default=ReportSource.PUBLIC,
    )
    confidence_level = Column(
        enum_column(ConfidenceLevel, 10),
        nullable=False,
        default=ConfidenceLevel.MEDIUM,
    )
    root_causes = Column(JSONType, nullable=False, default=list)
    evidence = Column(JSONType, nullable=True)

    dispute_status = Column(
        enum_column(DisputeStatus, 20),
        nullable=False,
        default=DisputeStatus.NONE,
        index=True,
    )
    is_draft = Column(Boolean, nullable=False, default=False)

    version = Column(Integer, nullable=False, comment="Optimistic lock counter")

    dispute_history = relationship(
        "DisputeHistoryEntry",
        back_populates="review",
        cascade="all, delete-orphan",
        order_by="DisputeHistoryEntry.timestamp",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        *(_rating_range(column) for column in RATING_COLUMNS.values()),
        CheckConstraint(
            "length(comment) >= 10 AND length(comment) <= 1000",
            name="check_comment_length",
        ),
        Index("idx_review_kitchen_verified_created", "kitchen_id", "verified", "created_at"),
        Index("idx_review_reviewer_created", "reviewer_id", "created_at"),
    )

    @validates("verification_status")
    def _sync_verified_flag(self, key, value):
        self.verified = VerificationStatus(value) == VerificationStatus.VERIFIED
        return value

    def rating_for(self, category: HaccpCategory) -> Decimal:
        return getattr(self, RATING_COLUMNS[category])

    @property
    def ratings(self) -> Dict[HaccpCategory, Decimal]:
        """Ratings keyed by HACCP dimension."""
        return {category: self.rating_for(category) for category in HaccpCategory}

    @hybrid_property
    def average_rating(self) -> Decimal:
        """Mean of the six ratings, rounded half-up to two decimals."""
        total = sum((Decimal(str(v)) for v in self.ratings.values()), Decimal("0"))
        return (total / Decimal(len(RATING_COLUMNS))).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )

    @average_rating.expression
    def average_rating(cls):
        return (
            cls.taste_rating
            + cls.hygiene_rating
            + cls.freshness_rating
            + cls.temperature_rating
            + cls.packaging_rating
            + cls.handling_rating
        ) / 6.0

    def __repr__(self) -> str:
        return (
            f"<Review(id={self.id}, kitchen_id={self.kitchen_id}, "
            f"verification={self.verification_status}, dispute={self.dispute_status})>"
        )


class DisputeHistoryEntry(BaseModel, AppendOnlyMixin):
    """
    Append-only record of a dispute action on a review.
    """

    __tablename__ = "review_dispute_history"

    review_id = Column(
        String(36),
        ForeignKey("reviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    timestamp = Column(DateTime, nullable=False, default=utcnow)
    action = Column(enum_column(DisputeAction, 20), nullable=False)
    by_user_id = Column(String(36), nullable=False)
    by_user_code = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)

    review = relationship("Review", back_populates="dispute_history")

    __table_args__ = (
        Index("idx_dispute_history_review_timestamp", "review_id", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<DisputeHistoryEntry(review_id={self.review_id}, action={self.action})>"
