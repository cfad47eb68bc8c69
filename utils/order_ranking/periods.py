# utils/order_ranking/periods.py
"""Month/year reporting periods."""

from datetime import date, datetime
from typing import List, Optional, Tuple

from .constants import MONTH_NAMES


def period_bounds(year: int, month: Optional[int] = None) -> Tuple[datetime, datetime]:
    """
    Start (inclusive) and end (exclusive) of a calendar month, or of the
    whole year when month is None.
    """
    year = int(year)
    if month is None:
        return datetime(year, 1, 1), datetime(year + 1, 1, 1)

    month = int(month)
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")

    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def year_options(lookback_years: int = 5, today: date = None) -> List[int]:
    """Current year first, going back lookback_years - 1 years."""
    if today is None:
        today = date.today()
    return [today.year - i for i in range(max(1, int(lookback_years)))]


def period_label(year: int, month: Optional[int] = None) -> str:
    if month is None:
        return str(year)
    return f"{MONTH_NAMES[int(month)]} {year}"
