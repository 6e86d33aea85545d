"""
Timeframe logic for payment summaries.
Provides date range calculations for CM, PM, YTD, L30 and L7, plus the
lenient date parsing used by the status derivation.
"""
from datetime import datetime, date, timedelta
from calendar import monthrange
from typing import Optional, Tuple, Union
from rentwise.models import Timeframe


def get_date_range(timeframe: Timeframe, reference_date: date = None) -> Tuple[date, date]:
    """
    Calculate date range based on timeframe.

    Args:
        timeframe: CM, PM, YTD, L30 or L7
        reference_date: Reference date (defaults to today)

    Returns:
        Tuple of (start_date, end_date), both inclusive

    - CM: 1st day of current month to today
    - PM: 1st to last day of preceding month
    - YTD: January 1st to today
    """
    if reference_date is None:
        reference_date = date.today()

    if timeframe == Timeframe.PM:
        if reference_date.month == 1:
            prev_year = reference_date.year - 1
            prev_month = 12
        else:
            prev_year = reference_date.year
            prev_month = reference_date.month - 1

        start = date(prev_year, prev_month, 1)
        _, last_day = monthrange(prev_year, prev_month)
        end = date(prev_year, prev_month, last_day)

    elif timeframe == Timeframe.L30:
        start = reference_date - timedelta(days=30)
        end = reference_date

    elif timeframe == Timeframe.L7:
        start = reference_date - timedelta(days=7)
        end = reference_date

    elif timeframe == Timeframe.YTD:
        start = date(reference_date.year, 1, 1)
        end = reference_date

    else:
        # Current month
        start = reference_date.replace(day=1)
        end = reference_date

    return start, end


def parse_datetime(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Parse a stored date or timestamp into a datetime.

    Date-only values mean local midnight. Anything unparseable yields None
    so callers can filter it out instead of failing.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.strptime(text, "%m/%d/%Y")
    except ValueError:
        return None


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    parsed = parse_datetime(value)
    return parsed.date() if parsed else None


def is_in_period(target_date: date, start: date, end: date) -> bool:
    """Check if target_date falls within the period."""
    if target_date is None:
        return False
    return start <= target_date <= end
