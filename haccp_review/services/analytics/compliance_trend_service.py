# haccp_review/services/analytics/compliance_trend_service.py
"""
Per-kitchen compliance trend over trailing calendar months.

Score for a month is the mean of the six HACCP ratings across verified
reviews created that month, rounded half-up to one decimal.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Iterator, List, Optional

from sqlalchemy.orm import Session

from haccp_review.config.logging import get_logger
from haccp_review.config.settings import Settings, get_settings
from haccp_review.models.review import RATING_COLUMNS
from haccp_review.repositories.kitchen import IncidentRepository, KitchenRepository
from haccp_review.repositories.review import ReviewRepository
from haccp_review.schemas.analytics import ComplianceTrendPoint, ComplianceTrendResponse
from haccp_review.services.common import NotFoundError, UnitOfWork, ValidationError
from haccp_review.utils.datetime_utils import month_key, trailing_months, utcnow

logger = get_logger(__name__)

_ONE_DECIMAL = Decimal("0.1")
_DIMENSIONS = Decimal(len(RATING_COLUMNS))


def month_score(review_totals: List[Decimal]) -> Optional[Decimal]:
    """Mean per-review average of the given six-rating totals, or ``None`` if empty."""
    if not review_totals:
        return None
    mean = sum(review_totals, Decimal("0")) / (_DIMENSIONS * len(review_totals))
    return mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)


class ComplianceTrendSeries:
    """
    Lazy, restartable sequence of ``ComplianceTrendPoint`` (most recent month first).

    Nothing is read until iteration; every iteration re-reads the window in
    its own read transaction, so repeated iterations over unchanged data
    yield equal points.
    """

    def __init__(
        self,
        loader: Callable[[], List[ComplianceTrendPoint]],
        kitchen_id: str,
        months: int,
    ) -> None:
        self._loader = loader
        self.kitchen_id = kitchen_id
        self.months = months

    def __iter__(self) -> Iterator[ComplianceTrendPoint]:
        return iter(self._loader())

    def __len__(self) -> int:
        return self.months

    def to_list(self) -> List[ComplianceTrendPoint]:
        return list(self)

    def to_response(self) -> ComplianceTrendResponse:
        return ComplianceTrendResponse(kitchen_id=self.kitchen_id, months=self.months, points=self.to_list())

    def __repr__(self) -> str:
        return f"<ComplianceTrendSeries(kitchen_id={self.kitchen_id}, months={self.months})>"


class ComplianceTrendService:
    """
    Derives compliance trends from verified reviews and incident records.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or get_settings()
        self._clock = clock or utcnow

    def get_trend(self, kitchen_id: str, months: Optional[int] = None) -> ComplianceTrendSeries:
        """
        Trend for the trailing ``months`` calendar months, current month included.

        The window is anchored when this method is called.

        Raises:
            ValidationError: If ``months`` is outside 1..TREND_MAX_MONTHS
            NotFoundError: If the kitchen does not exist
        """
        if months is None:
            months = self._settings.TREND_DEFAULT_MONTHS
        max_months = self._settings.TREND_MAX_MONTHS
        if isinstance(months, bool) or not isinstance(months, int) or not 1 <= months <= max_months:
            raise ValidationError(
                f"months must be between 1 and {max_months}",
                field="months",
                details={"months": months, "max": max_months},
            )

        with UnitOfWork(self._session_factory) as uow:
            if uow.get_repo(KitchenRepository).find_by_id(kitchen_id) is None:
                raise NotFoundError("Kitchen", kitchen_id)

        reference = self._clock()
        return ComplianceTrendSeries(
            lambda: self._load_points(kitchen_id, months, reference),
            kitchen_id,
            months,
        )

    def _load_points(self, kitchen_id: str, months: int, reference: datetime) -> List[ComplianceTrendPoint]:
        window = trailing_months(reference, months)
        start = window[-1][1]
        end = window[0][2]

        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            rows = uow.get_repo(ReviewRepository).verified_ratings_between(kitchen_id, start, end)
            incident_dates = uow.get_repo(IncidentRepository).dates_between(kitchen_id, start, end)

        totals: Dict[str, List[Decimal]] = defaultdict(list)
        for created_at, *ratings in rows:
            totals[month_key(created_at)].append(
                sum((Decimal(str(r)) for r in ratings), Decimal("0"))
            )

        incidents: Dict[str, int] = defaultdict(int)
        for occurred_at in incident_dates:
            incidents[month_key(occurred_at)] += 1

        points = [
            ComplianceTrendPoint(
                kitchen_id=kitchen_id,
                month=key,
                score=month_score(totals.get(key, [])),
                incident_count=incidents.get(key, 0),
                review_count=len(totals.get(key, [])),
            )
            for key, _, _ in window
        ]
        logger.debug(
            f"Trend for kitchen {kitchen_id}: {months} months from {window[0][0]}",
            extra={"kitchen_id": kitchen_id},
        )
        return points
