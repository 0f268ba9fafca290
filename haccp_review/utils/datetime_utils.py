"""
Date and time helpers for calendar-month windows.
"""

from datetime import datetime, timezone
from typing import List, Tuple

from dateutil.relativedelta import relativedelta


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the storage convention for all tables"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def month_start(dt: datetime) -> datetime:
    """Midnight of the first day of the month containing ``dt``"""
    return datetime(dt.year, dt.month, 1)


def month_key(dt: datetime) -> str:
    """Format a datetime as its ``YYYY-MM`` calendar month"""
    return f"{dt.year:04d}-{dt.month:02d}"


def trailing_months(reference: datetime, months: int) -> List[Tuple[str, datetime, datetime]]:
    """
    Calendar months ending with the month of ``reference``, most recent first.

    Each entry is ``(key, start, end)`` with ``end`` exclusive.
    """
    current = month_start(reference)
    window = []
    for offset in range(months):
        start = current - relativedelta(months=offset)
        window.append((month_key(start), start, start + relativedelta(months=1)))
    return window
