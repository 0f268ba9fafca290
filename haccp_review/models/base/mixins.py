"""
SQLAlchemy model mixins for reusable functionality.
"""

from sqlalchemy import Column, DateTime, event

from haccp_review.core.exceptions import ImmutableRecordError
from haccp_review.utils.datetime_utils import utcnow


class TimestampMixin:
    """
    Mixin for automatic timestamp tracking.

    Timestamps are naive UTC values assigned by the application so that
    month bucketing does not depend on the database server clock.
    """

    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        index=True,
        comment="Record creation timestamp (UTC)"
    )
    updated_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        comment="Record last update timestamp (UTC)"
    )


class AppendOnlyMixin:
    """
    Marker for log tables whose rows are never updated once written.

    Deleting rows together with their parent remains allowed.
    """


@event.listens_for(AppendOnlyMixin, "before_update", propagate=True)
def _reject_append_only_update(mapper, connection, target):
    raise ImmutableRecordError(target.__tablename__)
