"""
Core calculators for clinic insights.

Each calculator is responsible for one computation over flat daily entries,
following the single responsibility principle for better testability:

- GrowthCalculator: period-over-period change with the zero/infinity policy
- PeriodAggregator: totals over an inclusive date range
- HierarchicalRollup: month -> quarter -> semester -> year rollups and the
  year-over-year comparison grid
"""
from typing import List, Union
from decimal import Decimal
import logging
import math

from core.constants import (
    MONTHS_PER_YEAR,
    MONTH_NAMES_FULL,
    QUARTER_SPAN,
    SEMESTER_SPAN,
    ANNUAL_SPAN,
)
from services.insights_types import (
    DailyEntry,
    GrowthStatus,
    GrowthValue,
    PeriodTotals,
    YearRollup,
    MonthRow,
    SpanningChange,
)
from utils.datetime_utils import DateLike, to_date
from utils.insights_validators import validate_date_range

logger = logging.getLogger(__name__)

Number = Union[int, float, Decimal]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _empty_totals() -> PeriodTotals:
    return PeriodTotals(
        revenue=Decimal('0'),
        patient_count=0,
        doc_count=0,
        tomo_count=0
    )


class GrowthCalculator:
    """Calculates period-over-period change."""

    @staticmethod
    def percent_change(current: Number, previous: Number) -> float:
        """
        Ratio change of current over previous.

        - previous == 0: +inf when current > 0 (growth from nothing), else 0.0
        - otherwise: (current / previous) - 1, e.g. 1.0 means +100%
        - NaN in either input gives NaN

        The result is a ratio; callers format it as a percentage.
        """
        current_dec = _to_decimal(current)
        previous_dec = _to_decimal(previous)

        if current_dec.is_nan() or previous_dec.is_nan():
            return math.nan

        if previous_dec == 0:
            return math.inf if current_dec > 0 else 0.0

        return float(current_dec / previous_dec - 1)

    @staticmethod
    def classify(value: float) -> GrowthStatus:
        """Tri-state classification used by the presentation layer."""
        if math.isnan(value):
            return "undefined"
        if math.isinf(value):
            # Negative infinity cannot come out of percent_change, but keep it out of "finite"
            return "unbounded" if value > 0 else "undefined"
        return "finite"

    @staticmethod
    def to_growth_value(value: float) -> GrowthValue:
        """Convert a raw ratio into its serialisable tri-state form."""
        status = GrowthCalculator.classify(value)
        return GrowthValue(
            value=value if status == "finite" else None,
            status=status
        )


class PeriodAggregator:
    """Calculates totals of daily entries over a date range."""

    @staticmethod
    def aggregate_totals(
        entries: List[DailyEntry],
        start_date: DateLike,
        end_date: DateLike
    ) -> PeriodTotals:
        """
        Sum daily records whose date falls in [start_date, end_date].

        Both bounds are inclusive (the whole end day counts).

        Args:
            entries: Flat daily entries
            start_date: Range start (date or YYYY-MM-DD)
            end_date: Range end (date or YYYY-MM-DD)

        Returns:
            PeriodTotals; all zero when nothing matches

        Raises:
            ValidationError: If a date string is malformed or end_date < start_date
        """
        start = to_date(start_date)
        end = to_date(end_date)
        validate_date_range(start, end)

        totals = _empty_totals()
        matched = 0
        for entry in entries:
            if start <= entry['date'] <= end:
                record = entry['record']
                totals['revenue'] += record['revenue']
                totals['patient_count'] += record['patient_count']
                totals['doc_count'] += record['doc_count']
                totals['tomo_count'] += record['tomo_count']
                matched += 1

        logger.debug(f"Aggregated {matched} of {len(entries)} daily entries for {start} to {end}")
        return totals

    @staticmethod
    def monthly_totals(entries: List[DailyEntry], year: int) -> List[PeriodTotals]:
        """
        Totals of each calendar month of a year.

        Returns:
            12 PeriodTotals, index 0 = January; absent months are zero
        """
        months = [_empty_totals() for _ in range(MONTHS_PER_YEAR)]
        for entry in entries:
            entry_date = entry['date']
            if entry_date.year != year:
                continue
            bucket = months[entry_date.month - 1]
            record = entry['record']
            bucket['revenue'] += record['revenue']
            bucket['patient_count'] += record['patient_count']
            bucket['doc_count'] += record['doc_count']
            bucket['tomo_count'] += record['tomo_count']
        return months

    @staticmethod
    def average_ticket(totals: PeriodTotals) -> Decimal:
        """Revenue per patient; zero when there are no patients."""
        if totals['patient_count'] > 0:
            return totals['revenue'] / Decimal(totals['patient_count'])
        return Decimal('0')


class HierarchicalRollup:
    """Builds calendar-year rollups and the year-over-year comparison grid."""

    @staticmethod
    def build_year_rollup(entries: List[DailyEntry], year: int) -> YearRollup:
        """
        Revenue of a year at monthly, quarterly, semesterly and annual granularity.

        Quarters are 3-month slices, semesters pairs of quarters, and the
        annual value is the sum of the two semesters.
        """
        monthly = [t['revenue'] for t in PeriodAggregator.monthly_totals(entries, year)]
        quarterly = [
            sum(monthly[i:i + QUARTER_SPAN], Decimal('0'))
            for i in range(0, MONTHS_PER_YEAR, QUARTER_SPAN)
        ]
        semesterly = [
            sum(quarterly[i:i + 2], Decimal('0'))
            for i in range(0, len(quarterly), 2)
        ]
        annual = sum(semesterly, Decimal('0'))

        return YearRollup(
            year=year,
            monthly=monthly,
            quarterly=quarterly,
            semesterly=semesterly,
            annual=annual
        )

    @staticmethod
    def build_comparison_grid(
        entries: List[DailyEntry],
        year_a: int,
        year_b: int
    ) -> List[MonthRow]:
        """
        Build the 12-row comparison of year_b against year_a.

        Every row carries its monthly change. Quarterly, semesterly and annual
        changes are emitted once, on the first month they cover, together with
        the number of rows they span (3, 6 and 12). A year without data simply
        contributes zeros.
        """
        rollup_a = HierarchicalRollup.build_year_rollup(entries, year_a)
        rollup_b = HierarchicalRollup.build_year_rollup(entries, year_b)
        percent_change = GrowthCalculator.percent_change

        rows: List[MonthRow] = []
        for i in range(MONTHS_PER_YEAR):
            quarterly_change = None
            semesterly_change = None
            annual_change = None

            if i % QUARTER_SPAN == 0:
                q = i // QUARTER_SPAN
                quarterly_change = SpanningChange(
                    value=percent_change(rollup_b['quarterly'][q], rollup_a['quarterly'][q]),
                    span_count=QUARTER_SPAN
                )
            if i % SEMESTER_SPAN == 0:
                s = i // SEMESTER_SPAN
                semesterly_change = SpanningChange(
                    value=percent_change(rollup_b['semesterly'][s], rollup_a['semesterly'][s]),
                    span_count=SEMESTER_SPAN
                )
            if i == 0:
                annual_change = SpanningChange(
                    value=percent_change(rollup_b['annual'], rollup_a['annual']),
                    span_count=ANNUAL_SPAN
                )

            rows.append(MonthRow(
                month_index=i,
                month_name=MONTH_NAMES_FULL[i],
                year_a_revenue=rollup_a['monthly'][i],
                year_b_revenue=rollup_b['monthly'][i],
                monthly_change=percent_change(rollup_b['monthly'][i], rollup_a['monthly'][i]),
                quarterly_change=quarterly_change,
                semesterly_change=semesterly_change,
                annual_change=annual_change
            ))

        return rows
