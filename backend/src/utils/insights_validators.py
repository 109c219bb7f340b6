"""
Input validation utilities for the insights engine.

Provides centralized validation for the string-keyed snapshot convention
(four-digit year keys, two-digit month and day keys) and for the numeric
fields of persisted records, so malformed input fails loudly instead of
being silently aggregated as zero.
"""

import calendar
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from core.constants import DECLINE_REASONS, MAX_AMOUNT


class ValidationError(ValueError):
    """Raised when caller-provided input (dates, keys, record fields) is malformed."""
    pass


def validate_year_key(year_key: Union[str, int]) -> int:
    """
    Validate a year key from a snapshot mapping.

    Accepts "2024" or 2024.

    Raises:
        ValidationError: If the key is not a four-digit year
    """
    text = str(year_key).strip()
    if len(text) != 4 or not text.isdigit():
        raise ValidationError(f"Invalid year key (expected YYYY): {year_key!r}")
    year = int(text)
    if year < 1:
        raise ValidationError(f"Invalid year key (expected YYYY): {year_key!r}")
    return year


def validate_month_key(month_key: Union[str, int]) -> int:
    """
    Validate a month key ("01".."12"; unpadded "1".."12" is tolerated).

    Raises:
        ValidationError: If the key is not a calendar month
    """
    text = str(month_key).strip()
    if not text.isdigit() or len(text) > 2:
        raise ValidationError(f"Invalid month key (expected 01-12): {month_key!r}")
    month = int(text)
    if month < 1 or month > 12:
        raise ValidationError(f"Invalid month key (expected 01-12): {month_key!r}")
    return month


def validate_day_key(year: int, month: int, day_key: Union[str, int]) -> date:
    """
    Validate a day key against its year and month and build the calendar date.

    Raises:
        ValidationError: If the day does not exist in that month (e.g. "30" in February)
    """
    text = str(day_key).strip()
    if not text.isdigit() or len(text) > 2:
        raise ValidationError(f"Invalid day key (expected 01-31): {day_key!r}")
    day = int(text)
    days_in_month = calendar.monthrange(year, month)[1]
    if day < 1 or day > days_in_month:
        raise ValidationError(
            f"Invalid day key {day_key!r} for {year:04d}-{month:02d} "
            f"(month has {days_in_month} days)"
        )
    return date(year, month, day)


def validate_date_range(start_date: date, end_date: date) -> None:
    """
    Validate that a date range is ordered.

    Raises:
        ValidationError: If end_date is before start_date
    """
    if end_date < start_date:
        raise ValidationError(
            f"End date {end_date.isoformat()} is before start date {start_date.isoformat()}"
        )


def parse_amount(value: Any, field_name: str) -> Decimal:
    """
    Parse a money/financial field into a Decimal.

    Missing values (None or empty string) count as zero. Financial fields
    (profit, reserve) may be negative.

    Raises:
        ValidationError: If the value is not numeric, not finite, or beyond MAX_AMOUNT
    """
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, bool):
        raise ValidationError(f"Invalid numeric value for {field_name}: {value!r}")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"Invalid numeric value for {field_name}: {value!r}") from e
    if not amount.is_finite():
        raise ValidationError(f"Invalid numeric value for {field_name}: {value!r}")
    if abs(amount) > MAX_AMOUNT:
        raise ValidationError(f"Amount out of range for {field_name}: {value!r}")
    return amount


def parse_non_negative_amount(value: Any, field_name: str) -> Decimal:
    """
    Parse a money field that cannot be negative (daily revenue).

    Raises:
        ValidationError: If the value is invalid for parse_amount or negative
    """
    amount = parse_amount(value, field_name)
    if amount < 0:
        raise ValidationError(f"Invalid amount for {field_name} (expected non-negative): {value!r}")
    return amount


def parse_count(value: Any, field_name: str) -> int:
    """
    Parse a count field (patients, docs, tomos, exams) into a non-negative int.

    Missing values count as zero. Integral floats ("10.0") are accepted.

    Raises:
        ValidationError: If the value is not a non-negative whole number
    """
    amount = parse_amount(value, field_name)
    if amount != amount.to_integral_value():
        raise ValidationError(f"Invalid count for {field_name} (expected whole number): {value!r}")
    count = int(amount)
    if count < 0:
        raise ValidationError(f"Invalid count for {field_name} (expected non-negative): {value!r}")
    return count


def validate_decline_reason(reason: str) -> str:
    """
    Validate a decline reason.

    Valid values are the entries of DECLINE_REASONS, or '' (which clears a reason).

    Raises:
        ValidationError: If the reason is not part of the closed enumeration
    """
    if reason == '' or reason in DECLINE_REASONS:
        return reason
    raise ValidationError(f"Unknown decline reason: {reason!r}")
