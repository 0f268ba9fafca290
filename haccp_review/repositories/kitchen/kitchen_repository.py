"""
Read-only lookups against the kitchen registry tables.
"""

from datetime import datetime
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from haccp_review.core.exceptions import RepositoryError
from haccp_review.models.kitchen import Incident, Kitchen
from haccp_review.repositories.base import BaseRepository


class KitchenRepository(BaseRepository[Kitchen]):

    def __init__(self, session: Session):
        super().__init__(Kitchen, session)


class IncidentRepository(BaseRepository[Incident]):

    def __init__(self, session: Session):
        super().__init__(Incident, session)

    def dates_between(self, kitchen_id: str, start: datetime, end: datetime) -> List[datetime]:
        """Dates of the kitchen's incidents within ``[start, end)``."""
        try:
            rows = (
                self.db.query(Incident.date)
                .filter(
                    Incident.kitchen_id == kitchen_id,
                    Incident.date >= start,
                    Incident.date < end,
                )
                .all()
            )
        except SQLAlchemyError as e:
            raise RepositoryError(f"Incident window query failed: {str(e)}", operation="select") from e
        return [row[0] for row in rows]
