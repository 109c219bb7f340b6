"""
Datetime utilities for consistent date handling across the application.

All business dates are calendar dates in the clinic's timezone. "Today" is
never read implicitly by the calculators; entry points receive it as a
parameter and only the HTTP layer calls clinic_today().
"""

import calendar
import logging
from datetime import datetime, timezone, timedelta, date
from typing import Tuple, Union

from core.config import CLINIC_UTC_OFFSET_HOURS
from utils.insights_validators import ValidationError

logger = logging.getLogger(__name__)

# Clinic timezone constant (fixed offset, UTC-3 by default)
CLINIC_TZ = timezone(timedelta(hours=CLINIC_UTC_OFFSET_HOURS))

DateLike = Union[str, date]


def clinic_now() -> datetime:
    """
    Get current clinic datetime.

    Returns:
        Current datetime with the clinic's timezone
    """
    return datetime.now(CLINIC_TZ)


def clinic_today() -> date:
    """Get the current calendar date in the clinic's timezone."""
    return clinic_now().date()


def parse_date_string(date_str: str) -> date:
    """
    Parse an ISO calendar-date string (YYYY-MM-DD).

    Args:
        date_str: Date string in YYYY-MM-DD format

    Returns:
        Date object

    Raises:
        ValidationError: If date string is empty, malformed, or not a real calendar date
    """
    if not isinstance(date_str, str) or not date_str.strip():
        raise ValidationError("Date string cannot be empty")

    date_str = date_str.strip()
    parts = date_str.split('-')
    if len(parts) != 3 or len(parts[0]) != 4 or len(parts[1]) != 2 or len(parts[2]) != 2:
        raise ValidationError(f"Invalid date format (expected YYYY-MM-DD): {date_str}")

    try:
        return datetime.strptime(date_str, '%Y-%m-%d').date()
    except ValueError as e:
        raise ValidationError(f"Invalid date format (expected YYYY-MM-DD): {date_str}") from e


def to_date(value: DateLike) -> date:
    """Accept either a date or an ISO date string and return a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date_string(value)


def format_iso(d: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return d.isoformat()


def month_start(year: int, month: int) -> date:
    """First calendar day of a month."""
    return date(year, month, 1)


def month_end(year: int, month: int) -> date:
    """Last calendar day of a month (leap years included)."""
    return date(year, month, calendar.monthrange(year, month)[1])


def shift_years(d: date, years: int) -> date:
    """
    Move a date by a whole number of years.

    February 29 maps to February 28 when the target year is not a leap year.
    """
    target_year = d.year + years
    try:
        return d.replace(year=target_year)
    except ValueError:
        return date(target_year, 2, 28)


def previous_month(d: date) -> Tuple[int, int]:
    """(year, month) of the month before the given date's month."""
    if d.month == 1:
        return d.year - 1, 12
    return d.year, d.month - 1
