"""
Unit tests for summary calculators.
"""
import pytest
from decimal import Decimal

from services.insights_extractor import SnapshotExtractor
from services.summary_calculators import (
    YearlySummaryCalculator,
    FinancialSummaryCalculator,
    ProspectionSummaryCalculator,
    build_annual_chart_rows,
)


@pytest.fixture
def monthly_records(monthly_financial_store):
    return SnapshotExtractor.extract_monthly_financials(monthly_financial_store)


@pytest.fixture
def annual_records(annual_financial_store):
    return SnapshotExtractor.extract_annual_financials(annual_financial_store)


@pytest.fixture
def prospections(prospection_records):
    return SnapshotExtractor.extract_prospections(prospection_records)


class TestYearlySummaryCalculator:
    """Test per-year, per-month operational totals."""

    def test_empty(self):
        """Test that no entries give no years."""
        assert YearlySummaryCalculator.calculate([]) == {}

    def test_months_and_total(self, daily_entries):
        """Test month buckets, year totals and average ticket."""
        summary = YearlySummaryCalculator.calculate(daily_entries)

        assert list(summary) == [2023, 2024]
        year = summary[2024]
        assert len(year['months']) == 12
        assert year['months']['01']['patients'] == 15
        assert year['months']['01']['revenue'] == Decimal('3000')
        assert year['months']['01']['average_ticket'] == Decimal('200')
        assert year['months']['12']['revenue'] == Decimal('0')
        assert year['months']['12']['average_ticket'] == Decimal('0')
        assert year['total']['patients'] == 17
        assert year['total']['revenue'] == Decimal('3400')
        assert year['total']['docs'] == 3
        assert year['total']['tomos'] == 1
        assert year['total']['average_ticket'] == Decimal('200')


class TestFinancialSummaryCalculator:
    """Test reconciled and director-level financial summaries."""

    def test_monthly_financial_summary(self, monthly_records):
        """Test monthly buckets and year totals of reconciled figures."""
        summary = FinancialSummaryCalculator.monthly_financial_summary(monthly_records)

        assert list(summary) == [2023, 2024]
        total = summary[2024]['total']
        assert total['monthly_revenue'] == Decimal('3200')
        assert total['monthly_profit'] == Decimal('1000')
        assert total['dividends'] == Decimal('300')
        assert total['monthly_reserve'] == Decimal('150')
        assert summary[2024]['months']['03']['monthly_revenue'] == Decimal('0')

    def test_annual_kpis(self, daily_entries, annual_records):
        """Test EBITDA, profit, retained and margin against daily revenue."""
        operational = YearlySummaryCalculator.calculate(daily_entries)
        kpis = FinancialSummaryCalculator.annual_kpis(annual_records, operational)

        assert list(kpis) == [2024]
        k = kpis[2024]
        assert k['expenses'] == Decimal('950')
        assert k['investments'] == Decimal('300')
        assert k['taxes'] == Decimal('120')
        assert k['ebitda'] == Decimal('2450')
        assert k['profit'] == Decimal('2280')
        assert k['dividends'] == Decimal('400')
        assert k['retained'] == Decimal('1880')
        assert k['margin'] == pytest.approx(2280 / 3400)

    def test_annual_kpis_without_revenue(self, annual_records):
        """Test that a year without daily entries has zero margin."""
        kpis = FinancialSummaryCalculator.annual_kpis(annual_records, {})
        assert kpis[2024]['ebitda'] == Decimal('-950')
        assert kpis[2024]['margin'] == 0.0

    def test_reconciled_year_summaries(self, monthly_records, annual_records):
        """Test the union of years and ratio fields."""
        summaries = FinancialSummaryCalculator.reconciled_year_summaries(monthly_records, annual_records)

        assert [s['year'] for s in summaries] == [2023, 2024]
        y2023, y2024 = summaries
        assert y2023['revenue'] == Decimal('1000')
        assert y2023['expenses'] == Decimal('0')
        assert y2023['ebitda_margin'] == 1.0
        assert y2023['profit_margin'] == pytest.approx(0.2)
        assert y2023['dividend_payout_ratio'] == 0.0

        assert y2024['revenue'] == Decimal('3200')
        assert y2024['profit'] == Decimal('1000')
        assert y2024['expenses'] == Decimal('950')
        assert y2024['ebitda'] == Decimal('2250')
        assert y2024['ebitda_margin'] == pytest.approx(0.703125)
        assert y2024['profit_margin'] == pytest.approx(0.3125)
        assert y2024['dividends'] == Decimal('400')
        assert y2024['dividend_payout_ratio'] == pytest.approx(0.4)

    def test_payout_ratio_with_loss(self):
        """Test that the payout ratio is zero when profit is not positive."""
        monthly = {(2024, 1): {
            'monthly_revenue': Decimal('100'),
            'monthly_profit': Decimal('-20'),
            'dividends': Decimal('0'),
            'monthly_reserve': Decimal('0'),
        }}
        summaries = FinancialSummaryCalculator.reconciled_year_summaries(monthly, {})
        assert summaries[0]['dividend_payout_ratio'] == 0.0
        assert summaries[0]['profit_margin'] == pytest.approx(-0.2)

    def test_expense_breakdown(self, annual_records):
        """Test that only non-zero categories appear, investments last."""
        breakdown = FinancialSummaryCalculator.expense_breakdown(annual_records[2024])

        assert [(s['name'], s['value']) for s in breakdown] == [
            ('RH', Decimal('500')),
            ('Manutenção', Decimal('100')),
            ('Material', Decimal('200')),
            ('Operacional', Decimal('150')),
            ('Investimentos', Decimal('300')),
        ]
        assert FinancialSummaryCalculator.expense_breakdown(None) == []

    def test_monthly_financial_rows(self, monthly_records):
        """Test twelve rows with zeros for missing months."""
        rows = FinancialSummaryCalculator.monthly_financial_rows(monthly_records, 2024)

        assert len(rows) == 12
        assert rows[0]['month'] == 'Jan'
        assert rows[0]['revenue'] == Decimal('2800')
        assert rows[1]['reserve'] == Decimal('50')
        assert rows[2]['revenue'] == Decimal('0')


class TestProspectionSummaryCalculator:
    """Test prospection meeting counts."""

    def test_counts(self, prospections):
        """Test per-month counts and year totals."""
        summary = ProspectionSummaryCalculator.calculate(prospections)

        assert list(summary) == [2023, 2024]
        assert summary[2023]['months']['11'] == 1
        assert summary[2023]['total'] == 1
        assert summary[2024]['months']['02'] == 1
        assert summary[2024]['months']['05'] == 1
        assert summary[2024]['total'] == 2


class TestAnnualChartRows:
    """Test the annual chart rows."""

    def test_rows(self, daily_entries, monthly_records, prospections):
        """Test one ascending row per year present anywhere."""
        rows = build_annual_chart_rows(
            YearlySummaryCalculator.calculate(daily_entries),
            FinancialSummaryCalculator.monthly_financial_summary(monthly_records),
            ProspectionSummaryCalculator.calculate(prospections)
        )

        assert [r['year'] for r in rows] == [2023, 2024]
        row = rows[1]
        assert row['revenue'] == Decimal('3400')
        assert row['patients'] == 17
        assert row['reconciled_revenue'] == Decimal('3200')
        assert row['reconciled_profit'] == Decimal('1000')
        assert row['dividends'] == Decimal('300')
        assert row['reserve'] == Decimal('150')
        assert row['prospections'] == 2

    def test_year_only_in_prospections(self):
        """Test that a year with only prospections gets a zero row."""
        prospections = SnapshotExtractor.extract_prospections([{"id": 1, "meetingDate": "2021-06-01"}])
        rows = build_annual_chart_rows({}, {}, ProspectionSummaryCalculator.calculate(prospections))

        assert rows == [{
            'year': 2021,
            'revenue': Decimal('0'),
            'average_ticket': Decimal('0'),
            'patients': 0,
            'docs': 0,
            'tomos': 0,
            'reconciled_revenue': Decimal('0'),
            'reconciled_profit': Decimal('0'),
            'dividends': Decimal('0'),
            'reserve': Decimal('0'),
            'prospections': 1,
        }]
