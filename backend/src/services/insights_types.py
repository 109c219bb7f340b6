"""
Type definitions for clinic insights calculations.

This module provides TypedDict definitions for the flat records the extractor
produces from store snapshots and for the result structures every calculator
returns, keeping the calculation layer type-safe and easy to test.
"""
from typing import TypedDict, Optional, Literal, Dict, List, Tuple, Any
from datetime import date
from decimal import Decimal


# Snapshot shapes as handed over by the persistence collaborator
# (string-keyed, sparse: {"2024": {"01": {...}}})
DailyStore = Dict[str, Dict[str, Any]]
MonthlyFinancialStore = Dict[str, Dict[str, Dict[str, Any]]]
AnnualFinancialStore = Dict[str, Dict[str, Any]]
PartnerStore = Dict[str, Dict[str, List[Dict[str, Any]]]]

# Composite (year, month) key used instead of nested string-keyed mappings
MonthKey = Tuple[int, int]


class DailyRecord(TypedDict):
    """Operational figures for a single day."""
    patient_count: int
    revenue: Decimal
    doc_count: int
    tomo_count: int


class DailyEntry(TypedDict):
    """A DailyRecord together with the calendar date it belongs to."""
    date: date
    record: DailyRecord


class MonthlyFinancialRecord(TypedDict):
    """Reconciled (accountant-confirmed) monthly figures."""
    monthly_revenue: Decimal
    monthly_profit: Decimal
    dividends: Decimal
    monthly_reserve: Decimal


class AnnualFinancialRecord(TypedDict):
    """Director-level annual expense and dividend breakdown."""
    rh: Decimal
    maintenance: Decimal
    material: Decimal
    marketing: Decimal
    operational: Decimal
    equipment: Decimal
    interest: Decimal
    taxes: Decimal
    dividends_accounting: Decimal
    dividends_real: Decimal


class PartnerEntry(TypedDict):
    """
    One partner line of a monthly upload batch.

    `value` is the exam value for value-based batches and the exam count
    for by-exams batches.
    """
    dentist_name: str
    value: Decimal


class Prospection(TypedDict):
    """A prospection meeting with a referring dentist."""
    id: int
    dentist_name: str
    meeting_date: date


# Type alias for growth status
GrowthStatus = Literal["finite", "unbounded", "undefined"]


class GrowthValue(TypedDict):
    """
    Serialisable growth ratio.

    value is None unless status == "finite".
    """
    value: Optional[float]
    status: GrowthStatus


class PeriodTotals(TypedDict):
    """Totals of daily records over a date range."""
    revenue: Decimal
    patient_count: int
    doc_count: int
    tomo_count: int


class YearRollup(TypedDict):
    """Revenue of one calendar year at every granularity."""
    year: int
    monthly: List[Decimal]     # 12 values, index 0 = January
    quarterly: List[Decimal]   # 4 values
    semesterly: List[Decimal]  # 2 values
    annual: Decimal


class SpanningChange(TypedDict):
    """A change value attached to an anchor row that covers span_count month rows."""
    value: float
    span_count: int


class MonthRow(TypedDict):
    """One row of the year-over-year comparison grid."""
    month_index: int  # 0-11
    month_name: str
    year_a_revenue: Decimal
    year_b_revenue: Decimal
    monthly_change: float
    quarterly_change: Optional[SpanningChange]   # rows 0, 3, 6, 9
    semesterly_change: Optional[SpanningChange]  # rows 0, 6
    annual_change: Optional[SpanningChange]      # row 0


class PartnerTotal(TypedDict):
    """Aggregated value of one dentist over a period."""
    dentist_name: str
    total_value: Decimal


class PartnerComparison(TypedDict):
    """One dentist's value in the analysis period (p1) vs the comparison period (p2)."""
    dentist_name: str
    value_p1: Decimal
    value_p2: Decimal
    change: Decimal
    percent_change: float


class AnnualPoint(TypedDict):
    """Yearly total of one dentist."""
    year: int
    total: Decimal


class MonthlyTotals(TypedDict):
    """Monthly (or yearly) operational totals with average ticket."""
    patients: int
    revenue: Decimal
    docs: int
    tomos: int
    average_ticket: Decimal


class MonthlyFinancialTotals(TypedDict):
    """Reconciled financial totals of a month or a year."""
    monthly_revenue: Decimal
    monthly_profit: Decimal
    dividends: Decimal
    monthly_reserve: Decimal


class AnnualKpis(TypedDict):
    """Director-level annual results derived from daily revenue and the annual record."""
    expenses: Decimal
    investments: Decimal
    taxes: Decimal
    ebitda: Decimal
    profit: Decimal
    dividends: Decimal
    retained: Decimal
    margin: float


class ReconciledYearSummary(TypedDict):
    """Per-year reconciled financial overview."""
    year: int
    revenue: Decimal
    profit: Decimal
    expenses: Decimal
    ebitda: Decimal
    ebitda_margin: float
    profit_margin: float
    dividends: Decimal
    dividend_payout_ratio: float


class ExpenseSlice(TypedDict):
    """One non-zero expense category of a year."""
    key: str
    name: str
    value: Decimal


class PeriodRange(TypedDict):
    """An inclusive [start_date, end_date] range."""
    start_date: date
    end_date: date


class ComparisonPeriods(TypedDict):
    """Analysis period (period1) and comparison period (period2)."""
    period1: PeriodRange
    period2: PeriodRange


class YearlySummary(TypedDict):
    """Operational totals of one year: each month ("01".."12") and the year total."""
    year: int
    months: Dict[str, MonthlyTotals]
    total: MonthlyTotals


class YearlyFinancialSummary(TypedDict):
    """Reconciled financial totals of one year: each month and the year total."""
    year: int
    months: Dict[str, MonthlyFinancialTotals]
    total: MonthlyFinancialTotals


class YearlyProspectionSummary(TypedDict):
    """Prospection meetings per month of one year and the year total."""
    year: int
    months: Dict[str, int]
    total: int


class AnnualChartRow(TypedDict):
    """One year of the annual overview charts."""
    year: int
    revenue: Decimal
    average_ticket: Decimal
    patients: int
    docs: int
    tomos: int
    reconciled_revenue: Decimal
    reconciled_profit: Decimal
    dividends: Decimal
    reserve: Decimal
    prospections: int


class MonthlyComparisonRow(TypedDict):
    """Revenue and patients of one month for a year and the year before."""
    month: str
    revenue_current: Decimal
    revenue_previous: Decimal
    patients_current: int
    patients_previous: int


class MonthlyFinancialRow(TypedDict):
    """Reconciled figures of one month of a selected year."""
    month: str
    revenue: Decimal
    profit: Decimal
    dividends: Decimal
    reserve: Decimal


class DailyLogEntry(TypedDict):
    """A daily entry as listed in the entries log."""
    date: str  # ISO format date string
    patients: int
    revenue: Decimal
    docs: int
    tomos: int


class ProspectionYearGroup(TypedDict):
    """Prospections of one year, newest meeting first."""
    year: int
    prospections: List[Prospection]
