"""
Unit tests for insights calculators.
"""
import math
import pytest
from datetime import date
from decimal import Decimal

from services.insights_calculators import GrowthCalculator, PeriodAggregator, HierarchicalRollup
from services.insights_extractor import SnapshotExtractor
from utils.insights_validators import ValidationError


class TestGrowthCalculator:
    """Test period-over-period change."""

    def test_zero_division_policy(self):
        """Test the previous == 0 cases."""
        assert GrowthCalculator.percent_change(0, 0) == 0.0
        assert GrowthCalculator.percent_change(100, 0) == math.inf
        assert GrowthCalculator.percent_change(-5, 0) == 0.0

    def test_full_decline(self):
        """Test that dropping to zero is -100%."""
        assert GrowthCalculator.percent_change(0, 100) == -1.0

    def test_ratio(self):
        """Test that the result is a ratio, not a percentage."""
        assert GrowthCalculator.percent_change(3000, 1500) == 1.0
        assert GrowthCalculator.percent_change(Decimal('75'), Decimal('100')) == -0.25

    def test_nan_propagates(self):
        """Test that NaN inputs give NaN."""
        assert math.isnan(GrowthCalculator.percent_change(float('nan'), 100))
        assert math.isnan(GrowthCalculator.percent_change(100, float('nan')))

    def test_classify(self):
        """Test the tri-state classification."""
        assert GrowthCalculator.classify(0.5) == "finite"
        assert GrowthCalculator.classify(math.inf) == "unbounded"
        assert GrowthCalculator.classify(math.nan) == "undefined"
        assert GrowthCalculator.classify(-math.inf) == "undefined"

    def test_to_growth_value(self):
        """Test the serialisable form never carries inf or NaN."""
        assert GrowthCalculator.to_growth_value(0.25) == {'value': 0.25, 'status': 'finite'}
        assert GrowthCalculator.to_growth_value(math.inf) == {'value': None, 'status': 'unbounded'}
        assert GrowthCalculator.to_growth_value(math.nan) == {'value': None, 'status': 'undefined'}


class TestPeriodAggregator:
    """Test date-range totals."""

    def test_end_to_end_scenario(self, daily_entries):
        """Test January 2024 totals and growth over January 2023."""
        current = PeriodAggregator.aggregate_totals(daily_entries, "2024-01-01", "2024-01-31")
        previous = PeriodAggregator.aggregate_totals(daily_entries, "2023-01-01", "2023-01-31")

        assert current['revenue'] == Decimal('3000')
        assert current['patient_count'] == 15
        assert current['doc_count'] == 3
        assert current['tomo_count'] == 1
        assert previous['revenue'] == Decimal('1500')
        assert GrowthCalculator.percent_change(current['revenue'], previous['revenue']) == 1.0

    def test_range_is_inclusive(self):
        """Test that the end date is included and the next day is not."""
        entries = SnapshotExtractor.extract_daily_entries({
            "2024": {
                "01": {"days": {"31": {"revenue": 100, "patients": 1}}},
                "02": {"days": {"01": {"revenue": 200, "patients": 2}}},
            }
        })
        totals = PeriodAggregator.aggregate_totals(entries, "2024-01-01", "2024-01-31")
        assert totals['revenue'] == Decimal('100')
        assert totals['patient_count'] == 1

    def test_single_day_range(self, daily_entries):
        """Test a range where start equals end."""
        totals = PeriodAggregator.aggregate_totals(daily_entries, date(2024, 1, 20), date(2024, 1, 20))
        assert totals['revenue'] == Decimal('2000')

    def test_empty_inputs(self, daily_entries):
        """Test that empty stores and empty ranges give zeros."""
        empty = {'revenue': Decimal('0'), 'patient_count': 0, 'doc_count': 0, 'tomo_count': 0}
        assert PeriodAggregator.aggregate_totals([], "2024-01-01", "2024-12-31") == empty
        assert PeriodAggregator.aggregate_totals(daily_entries, "2022-01-01", "2022-12-31") == empty

    def test_idempotent(self, daily_entries):
        """Test that repeated calls give identical results."""
        first = PeriodAggregator.aggregate_totals(daily_entries, "2023-01-01", "2024-12-31")
        second = PeriodAggregator.aggregate_totals(daily_entries, "2023-01-01", "2024-12-31")
        assert first == second

    def test_invalid_dates(self, daily_entries):
        """Test malformed and reversed ranges raise ValidationError."""
        with pytest.raises(ValidationError):
            PeriodAggregator.aggregate_totals(daily_entries, "2024-13-01", "2024-12-31")
        with pytest.raises(ValidationError):
            PeriodAggregator.aggregate_totals(daily_entries, "2024-02-01", "2024-01-01")

    def test_monthly_totals(self, daily_entries):
        """Test that every month of a year is present."""
        months = PeriodAggregator.monthly_totals(daily_entries, 2024)

        assert len(months) == 12
        assert months[0]['revenue'] == Decimal('3000')
        assert months[1]['revenue'] == Decimal('400')
        assert all(m['revenue'] == Decimal('0') for m in months[2:])

    def test_average_ticket(self):
        """Test revenue per patient, zero without patients."""
        totals = {'revenue': Decimal('3000'), 'patient_count': 15, 'doc_count': 0, 'tomo_count': 0}
        assert PeriodAggregator.average_ticket(totals) == Decimal('200')
        totals['patient_count'] = 0
        assert PeriodAggregator.average_ticket(totals) == Decimal('0')


class TestHierarchicalRollup:
    """Test year rollups and the comparison grid."""

    def test_year_rollup(self, daily_entries):
        """Test quarterly, semesterly and annual values."""
        rollup = HierarchicalRollup.build_year_rollup(daily_entries, 2023)

        assert rollup['quarterly'] == [Decimal('2400'), Decimal('0'), Decimal('0'), Decimal('0')]
        assert rollup['semesterly'] == [Decimal('2400'), Decimal('0')]
        assert rollup['annual'] == Decimal('2400')
        assert sum(rollup['monthly']) == rollup['annual']

    def test_grid_anchoring(self, daily_entries):
        """Test which rows carry the spanning change values."""
        rows = HierarchicalRollup.build_comparison_grid(daily_entries, 2023, 2024)

        assert len(rows) == 12
        assert [r['month_index'] for r in rows if r['quarterly_change']] == [0, 3, 6, 9]
        assert [r['month_index'] for r in rows if r['semesterly_change']] == [0, 6]
        assert [r['month_index'] for r in rows if r['annual_change']] == [0]
        assert all(r['quarterly_change']['span_count'] == 3 for r in rows if r['quarterly_change'])
        assert all(r['semesterly_change']['span_count'] == 6 for r in rows if r['semesterly_change'])
        assert rows[0]['annual_change']['span_count'] == 12

    def test_grid_values(self, daily_entries):
        """Test the changes of 2024 against 2023."""
        rows = HierarchicalRollup.build_comparison_grid(daily_entries, 2023, 2024)

        assert rows[0]['month_name'] == 'JANEIRO'
        assert rows[0]['year_a_revenue'] == Decimal('1500')
        assert rows[0]['year_b_revenue'] == Decimal('3000')
        assert rows[0]['monthly_change'] == 1.0
        # February: 400 against nothing
        assert rows[1]['monthly_change'] == math.inf
        # March: nothing against 900
        assert rows[2]['monthly_change'] == -1.0
        # Empty months
        assert rows[5]['monthly_change'] == 0.0
        # Q1: 3400 vs 2400
        assert rows[0]['quarterly_change']['value'] == pytest.approx(3400 / 2400 - 1)
        assert rows[3]['quarterly_change']['value'] == 0.0
        assert rows[0]['annual_change']['value'] == pytest.approx(3400 / 2400 - 1)

    def test_year_without_data(self, daily_entries):
        """Test that a year with no entries contributes zeros."""
        rows = HierarchicalRollup.build_comparison_grid(daily_entries, 2020, 2024)

        assert all(r['year_a_revenue'] == Decimal('0') for r in rows)
        assert rows[0]['annual_change']['value'] == math.inf
