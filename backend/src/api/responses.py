"""
Shared response models for API endpoints.

This module contains Pydantic response models for the report endpoints.
Money is serialized as float rounded to cents; growth ratios are serialized
in their tri-state form so JSON never carries Infinity or NaN.
"""

from typing import List, Optional, Dict, Literal

from pydantic import BaseModel


class GrowthValueResponse(BaseModel):
    """Growth ratio; value is None unless status is "finite" (1.0 means +100%)."""
    value: Optional[float] = None
    status: Literal["finite", "unbounded", "undefined"]


class DateRangeResponse(BaseModel):
    """Inclusive date range as ISO dates."""
    start_date: str
    end_date: str


class PeriodTotalsResponse(BaseModel):
    """Operational totals of a date range."""
    revenue: float
    patient_count: int
    doc_count: int
    tomo_count: int
    average_ticket: float


class TotalsGrowthResponse(BaseModel):
    """Growth of every operational metric."""
    revenue: GrowthValueResponse
    patient_count: GrowthValueResponse
    doc_count: GrowthValueResponse
    tomo_count: GrowthValueResponse


class PeriodComparisonResponse(BaseModel):
    """Response model for a date range against the same range one year earlier."""
    current_period: DateRangeResponse
    previous_period: DateRangeResponse
    current: PeriodTotalsResponse
    previous: PeriodTotalsResponse
    growth: TotalsGrowthResponse


class CurrentMonthOverviewResponse(BaseModel):
    """Response model for month-to-date and year-to-date figures."""
    today: str
    month_to_date: PeriodTotalsResponse
    month_to_date_last_year: PeriodTotalsResponse
    growth: TotalsGrowthResponse
    year_to_date: PeriodTotalsResponse
    year_to_date_last_year: PeriodTotalsResponse
    average_ticket_growth: GrowthValueResponse


# Year comparison grid
class SpanningChangeResponse(BaseModel):
    """A change value rendered once and spanning span_count rows."""
    value: GrowthValueResponse
    span_count: int


class MonthRowResponse(BaseModel):
    """One month row of the year comparison grid."""
    month_index: int  # 0-11
    month_name: str
    year_a_revenue: float
    year_b_revenue: float
    monthly_change: GrowthValueResponse
    quarterly_change: Optional[SpanningChangeResponse] = None  # rows 0, 3, 6, 9
    semesterly_change: Optional[SpanningChangeResponse] = None  # rows 0, 6
    annual_change: Optional[SpanningChangeResponse] = None  # row 0


class YearComparisonResponse(BaseModel):
    """Response model for the year-over-year comparison grid."""
    year_a: int
    year_b: int
    year_a_total: float
    year_b_total: float
    rows: List[MonthRowResponse]


class MonthlyComparisonRowResponse(BaseModel):
    """Revenue and patients of one month for a year and the year before."""
    month: str
    revenue_current: float
    revenue_previous: float
    patients_current: int
    patients_previous: int


class MonthlyComparisonResponse(BaseModel):
    """Response model for the monthly comparison chart."""
    year: int
    previous_year: int
    rows: List[MonthlyComparisonRowResponse]


# Partner reports
class PartnerTotalResponse(BaseModel):
    """Total of one dentist over a period."""
    dentist_name: str
    total_value: float


class PartnerComparisonResponse(BaseModel):
    """One dentist in the analysis period (p1) against the comparison period (p2)."""
    dentist_name: str
    value_p1: float
    value_p2: float
    change: float
    percent_change: GrowthValueResponse


class PartnerDeclineResponse(PartnerComparisonResponse):
    """A declining dentist with the key and value of the recorded decline reason."""
    decline_key: str
    reason: str = ''


class PartnerEvolutionResponse(BaseModel):
    """Response model for the partner evolution report."""
    metric: Literal["exam_value", "exam_count"]
    period1: DateRangeResponse
    period2: DateRangeResponse
    period1_ranking: List[PartnerTotalResponse]
    period2_ranking: List[PartnerTotalResponse]
    period1_total: float
    period2_total: float
    total_change: float
    total_percent_change: GrowthValueResponse
    comparison: List[PartnerComparisonResponse]
    growth: List[PartnerComparisonResponse]
    decline: List[PartnerDeclineResponse]


class DentistMonthlyPoint(BaseModel):
    """One month of a dentist's series in both periods."""
    month: str
    period1: float
    period2: float


class DentistAnnualPoint(BaseModel):
    """One year of a dentist's series."""
    year: int
    total: float


class DentistPerformanceResponse(BaseModel):
    """Response model for one dentist's performance series."""
    dentist_name: str
    known_dentist: bool
    period1: DateRangeResponse
    period2: DateRangeResponse
    monthly: List[DentistMonthlyPoint]
    annual: List[DentistAnnualPoint]


class DentistListResponse(BaseModel):
    """Response model for listing dentists."""
    dentists: List[str]


class ComparisonPeriodsResponse(BaseModel):
    """An analysis period and a comparison period."""
    period1: DateRangeResponse
    period2: DateRangeResponse


class ComparisonPresetsResponse(BaseModel):
    """Response model for the quick-pick period pairs."""
    default: ComparisonPeriodsResponse
    current_year: ComparisonPeriodsResponse
    last_year: ComparisonPeriodsResponse


class DeclineReasonsResponse(BaseModel):
    """Response model for the decline reasons mapping after an update."""
    reasons: Dict[str, str]


# Summary reports
class MonthlyTotalsResponse(BaseModel):
    """Operational totals of a month or a year."""
    patients: int
    revenue: float
    docs: int
    tomos: int
    average_ticket: float


class MonthTotalsResponse(MonthlyTotalsResponse):
    """Operational totals of one month ("01".."12")."""
    month: str


class YearlyOperationalResponse(BaseModel):
    """Operational figures of one year."""
    year: int
    months: List[MonthTotalsResponse]
    total: MonthlyTotalsResponse


class FinancialTotalsResponse(BaseModel):
    """Reconciled financial totals of a month or a year."""
    monthly_revenue: float
    monthly_profit: float
    dividends: float
    monthly_reserve: float


class MonthFinancialTotalsResponse(FinancialTotalsResponse):
    """Reconciled figures of one month ("01".."12")."""
    month: str


class YearlyFinancialResponse(BaseModel):
    """Reconciled financial figures of one year."""
    year: int
    months: List[MonthFinancialTotalsResponse]
    total: FinancialTotalsResponse


class MonthCountResponse(BaseModel):
    """A count for one month ("01".."12")."""
    month: str
    count: int


class YearlyProspectionResponse(BaseModel):
    """Prospection meetings of one year."""
    year: int
    months: List[MonthCountResponse]
    total: int


class AnnualKpisResponse(BaseModel):
    """Director-level results of one year."""
    year: int
    expenses: float
    investments: float
    taxes: float
    ebitda: float
    profit: float
    dividends: float
    retained: float
    margin: float  # ratio, profit / revenue


class AnnualChartRowResponse(BaseModel):
    """One year of the annual overview charts."""
    year: int
    revenue: float
    average_ticket: float
    patients: int
    docs: int
    tomos: int
    reconciled_revenue: float
    reconciled_profit: float
    dividends: float
    reserve: float
    prospections: int


class YearlySummaryResponse(BaseModel):
    """Response model for the yearly summary."""
    years: List[int]
    operational: List[YearlyOperationalResponse]
    financial: List[YearlyFinancialResponse]
    prospections: List[YearlyProspectionResponse]
    kpis: List[AnnualKpisResponse]
    annual_chart: List[AnnualChartRowResponse]


class ReconciledYearResponse(BaseModel):
    """Reconciled financial overview of one year."""
    year: int
    revenue: float
    profit: float
    expenses: float
    ebitda: float
    ebitda_margin: float
    profit_margin: float
    dividends: float
    dividend_payout_ratio: float


class ExpenseSliceResponse(BaseModel):
    """One non-zero expense category."""
    key: str
    name: str
    value: float


class MonthlyFinancialRowResponse(BaseModel):
    """Reconciled figures of one month of the selected year."""
    month: str
    revenue: float
    profit: float
    dividends: float
    reserve: float


class FinancialOverviewResponse(BaseModel):
    """Response model for the financial overview."""
    available_years: List[int]  # Most recent first
    selected_year: Optional[int] = None
    years: List[ReconciledYearResponse]
    expense_breakdown: List[ExpenseSliceResponse]
    monthly: List[MonthlyFinancialRowResponse]


# Listings
class DailyLogEntryResponse(BaseModel):
    """One daily entry of the entries log."""
    date: str
    patients: int
    revenue: float
    docs: int
    tomos: int


class EntriesListResponse(BaseModel):
    """Response model for listing daily entries."""
    entries: List[DailyLogEntryResponse]


class ProspectionResponse(BaseModel):
    """A prospection meeting."""
    id: int
    dentist_name: str
    meeting_date: str


class ProspectionYearResponse(BaseModel):
    """Prospections of one year, newest first."""
    year: int
    prospections: List[ProspectionResponse]


class ProspectionListResponse(BaseModel):
    """Response model for listing prospections grouped by year."""
    groups: List[ProspectionYearResponse]
