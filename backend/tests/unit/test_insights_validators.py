"""
Unit tests for insights input validation utilities.
"""

import pytest
from datetime import date
from decimal import Decimal

from utils.insights_validators import (
    ValidationError,
    validate_year_key,
    validate_month_key,
    validate_day_key,
    validate_date_range,
    parse_amount,
    parse_non_negative_amount,
    parse_count,
    validate_decline_reason,
)


class TestValidationError:
    """Test the ValidationError type."""

    def test_is_value_error(self):
        """Test that ValidationError can be handled as a ValueError."""
        assert issubclass(ValidationError, ValueError)


class TestKeyValidation:
    """Test cases for year/month/day key validation."""

    def test_valid_year_keys(self):
        """Test four-digit year keys as strings and ints."""
        assert validate_year_key("2024") == 2024
        assert validate_year_key(2023) == 2023

    def test_invalid_year_keys(self):
        """Test that malformed year keys raise ValidationError."""
        for key in ["24", "20245", "abcd", "", "0000"]:
            with pytest.raises(ValidationError, match="Invalid year key"):
                validate_year_key(key)

    def test_valid_month_keys(self):
        """Test padded and unpadded month keys."""
        assert validate_month_key("01") == 1
        assert validate_month_key("12") == 12
        assert validate_month_key("3") == 3

    def test_invalid_month_keys(self):
        """Test that off-calendar months raise ValidationError."""
        for key in ["00", "13", "1a", "", "012"]:
            with pytest.raises(ValidationError, match="Invalid month key"):
                validate_month_key(key)

    def test_valid_day_key(self):
        """Test day keys build the calendar date."""
        assert validate_day_key(2024, 2, "29") == date(2024, 2, 29)
        assert validate_day_key(2024, 1, "05") == date(2024, 1, 5)

    def test_day_outside_month(self):
        """Test that days past the end of the month raise ValidationError."""
        with pytest.raises(ValidationError, match="month has 28 days"):
            validate_day_key(2023, 2, "29")
        with pytest.raises(ValidationError):
            validate_day_key(2024, 4, "31")
        with pytest.raises(ValidationError):
            validate_day_key(2024, 1, "00")


class TestDateRange:
    """Test cases for validate_date_range."""

    def test_ordered_range(self):
        """Test that ordered and single-day ranges pass."""
        validate_date_range(date(2024, 1, 1), date(2024, 1, 31))
        validate_date_range(date(2024, 1, 1), date(2024, 1, 1))

    def test_reversed_range(self):
        """Test that end before start raises ValidationError."""
        with pytest.raises(ValidationError, match="before start date"):
            validate_date_range(date(2024, 2, 1), date(2024, 1, 31))


class TestNumericParsing:
    """Test cases for parse_amount and parse_count."""

    def test_missing_values_are_zero(self):
        """Test that None and empty string count as zero."""
        assert parse_amount(None, 'revenue') == Decimal('0')
        assert parse_amount('', 'revenue') == Decimal('0')
        assert parse_count(None, 'patients') == 0

    def test_amounts(self):
        """Test ints, floats and numeric strings."""
        assert parse_amount(1500, 'revenue') == Decimal('1500')
        assert parse_amount(12.5, 'revenue') == Decimal('12.5')
        assert parse_amount('99.90', 'revenue') == Decimal('99.90')
        assert parse_amount(-10, 'monthly_profit') == Decimal('-10')

    def test_invalid_amounts(self):
        """Test that non-numeric and non-finite values raise ValidationError."""
        for value in ['abc', True, float('inf'), float('nan'), 'NaN']:
            with pytest.raises(ValidationError, match="Invalid numeric value"):
                parse_amount(value, 'revenue')

    def test_out_of_range_amounts(self):
        """Test that amounts too large to round to cents raise ValidationError."""
        assert parse_amount('1e15', 'revenue') == Decimal('1e15')
        for value in ['1e30', '-1e30', 10 ** 20]:
            with pytest.raises(ValidationError, match="out of range"):
                parse_amount(value, 'revenue')

    def test_non_negative_amounts(self):
        """Test that revenue accepts zero and positive values but rejects negative ones."""
        assert parse_non_negative_amount(0, 'revenue') == Decimal('0')
        assert parse_non_negative_amount(None, 'revenue') == Decimal('0')
        assert parse_non_negative_amount('250.50', 'revenue') == Decimal('250.50')
        with pytest.raises(ValidationError, match="non-negative"):
            parse_non_negative_amount(-500, 'revenue')
        with pytest.raises(ValidationError, match="Invalid numeric value"):
            parse_non_negative_amount('abc', 'revenue')

    def test_counts(self):
        """Test whole-number counts, including integral floats."""
        assert parse_count(10, 'patients') == 10
        assert parse_count('7', 'patients') == 7
        assert parse_count(3.0, 'patients') == 3

    def test_invalid_counts(self):
        """Test that fractional or negative counts raise ValidationError."""
        with pytest.raises(ValidationError, match="whole number"):
            parse_count(2.5, 'patients')
        with pytest.raises(ValidationError, match="non-negative"):
            parse_count(-1, 'patients')


class TestDeclineReason:
    """Test cases for validate_decline_reason."""

    def test_known_reasons(self):
        """Test that every member of the enumeration is accepted."""
        assert validate_decline_reason('Concorrência') == 'Concorrência'
        assert validate_decline_reason('Não sabe motivo') == 'Não sabe motivo'

    def test_empty_reason_clears(self):
        """Test that the empty string is accepted (it clears a reason)."""
        assert validate_decline_reason('') == ''

    def test_unknown_reason(self):
        """Test that values outside the enumeration raise ValidationError."""
        with pytest.raises(ValidationError, match="Unknown decline reason"):
            validate_decline_reason('Outro')
