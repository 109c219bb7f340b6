"""
Summary calculators for the yearly overview and the financial dashboard.

Combines the operational daily entries with the reconciled monthly figures,
the director-level annual record and the prospection log.
"""
from typing import List, Dict, Optional, Set
from decimal import Decimal
from collections import defaultdict
import logging

from core.constants import MONTH_KEYS, MONTH_NAMES, EXPENSE_CATEGORIES, INVESTMENT_CATEGORY
from services.insights_calculators import PeriodAggregator
from services.insights_types import (
    DailyEntry,
    MonthKey,
    MonthlyFinancialRecord,
    AnnualFinancialRecord,
    Prospection,
    MonthlyTotals,
    MonthlyFinancialTotals,
    YearlySummary,
    YearlyFinancialSummary,
    YearlyProspectionSummary,
    AnnualKpis,
    AnnualChartRow,
    ReconciledYearSummary,
    ExpenseSlice,
    MonthlyFinancialRow,
    PeriodTotals,
)

logger = logging.getLogger(__name__)


def _ratio(numerator: Decimal, denominator: Decimal) -> float:
    """numerator / denominator as float; 0.0 unless the denominator is positive."""
    if denominator > 0:
        return float(numerator / denominator)
    return 0.0


def _to_monthly_totals(totals: PeriodTotals) -> MonthlyTotals:
    return MonthlyTotals(
        patients=totals['patient_count'],
        revenue=totals['revenue'],
        docs=totals['doc_count'],
        tomos=totals['tomo_count'],
        average_ticket=PeriodAggregator.average_ticket(totals)
    )


def _empty_financial_totals() -> MonthlyFinancialTotals:
    return MonthlyFinancialTotals(
        monthly_revenue=Decimal('0'),
        monthly_profit=Decimal('0'),
        dividends=Decimal('0'),
        monthly_reserve=Decimal('0')
    )


def _expenses(record: AnnualFinancialRecord) -> Decimal:
    return sum((record[key] for key, _name in EXPENSE_CATEGORIES), Decimal('0'))


class YearlySummaryCalculator:
    """Calculates per-year, per-month operational totals."""

    @staticmethod
    def calculate(entries: List[DailyEntry]) -> Dict[int, YearlySummary]:
        """
        Totals of every month of every year that has daily entries.

        Returns:
            Mapping year -> YearlySummary; months without entries are zero
        """
        years = sorted({entry['date'].year for entry in entries})
        summary: Dict[int, YearlySummary] = {}

        for year in years:
            monthly = PeriodAggregator.monthly_totals(entries, year)
            year_totals = PeriodTotals(
                revenue=sum((m['revenue'] for m in monthly), Decimal('0')),
                patient_count=sum(m['patient_count'] for m in monthly),
                doc_count=sum(m['doc_count'] for m in monthly),
                tomo_count=sum(m['tomo_count'] for m in monthly)
            )
            summary[year] = YearlySummary(
                year=year,
                months={MONTH_KEYS[i]: _to_monthly_totals(m) for i, m in enumerate(monthly)},
                total=_to_monthly_totals(year_totals)
            )

        return summary


class FinancialSummaryCalculator:
    """Calculates reconciled and director-level financial summaries."""

    @staticmethod
    def monthly_financial_summary(
        records: Dict[MonthKey, MonthlyFinancialRecord]
    ) -> Dict[int, YearlyFinancialSummary]:
        """Reconciled figures of every month of every year with records, plus year totals."""
        summary: Dict[int, YearlyFinancialSummary] = {}

        for year in sorted({year for year, _month in records}):
            months = {key: _empty_financial_totals() for key in MONTH_KEYS}
            total = _empty_financial_totals()
            for month in range(1, 13):
                record = records.get((year, month))
                if record is None:
                    continue
                bucket = months[MONTH_KEYS[month - 1]]
                for field in ('monthly_revenue', 'monthly_profit', 'dividends', 'monthly_reserve'):
                    bucket[field] = record[field]  # type: ignore[literal-required]
                    total[field] += record[field]  # type: ignore[literal-required]
            summary[year] = YearlyFinancialSummary(year=year, months=months, total=total)

        return summary

    @staticmethod
    def annual_kpis(
        annual_records: Dict[int, AnnualFinancialRecord],
        operational: Dict[int, YearlySummary]
    ) -> Dict[int, AnnualKpis]:
        """
        Director-level results of every year with an annual record.

        Revenue is the operational (daily) revenue of the year:
        EBITDA = revenue - expenses, profit = EBITDA - interest - taxes,
        retained = profit - real dividends, margin = profit / revenue.
        """
        kpis: Dict[int, AnnualKpis] = {}
        for year in sorted(annual_records):
            record = annual_records[year]
            year_summary = operational.get(year)
            revenue = year_summary['total']['revenue'] if year_summary else Decimal('0')

            expenses = _expenses(record)
            ebitda = revenue - expenses
            profit = ebitda - record['interest'] - record['taxes']
            dividends = record['dividends_real']

            kpis[year] = AnnualKpis(
                expenses=expenses,
                investments=record['equipment'],
                taxes=record['taxes'],
                ebitda=ebitda,
                profit=profit,
                dividends=dividends,
                retained=profit - dividends,
                margin=_ratio(profit, revenue)
            )
        return kpis

    @staticmethod
    def reconciled_year_summaries(
        monthly_records: Dict[MonthKey, MonthlyFinancialRecord],
        annual_records: Dict[int, AnnualFinancialRecord]
    ) -> List[ReconciledYearSummary]:
        """
        Reconciled overview of every year with monthly or annual records, ascending by year.

        Revenue and profit come from the monthly records, expenses and real
        dividends from the annual record (zero when missing).
        """
        years = sorted({year for year, _month in monthly_records} | set(annual_records))
        summaries: List[ReconciledYearSummary] = []

        for year in years:
            revenue = Decimal('0')
            profit = Decimal('0')
            for (record_year, _month), record in monthly_records.items():
                if record_year == year:
                    revenue += record['monthly_revenue']
                    profit += record['monthly_profit']

            annual = annual_records.get(year)
            expenses = _expenses(annual) if annual else Decimal('0')
            dividends = annual['dividends_real'] if annual else Decimal('0')
            ebitda = revenue - expenses

            summaries.append(ReconciledYearSummary(
                year=year,
                revenue=revenue,
                profit=profit,
                expenses=expenses,
                ebitda=ebitda,
                ebitda_margin=_ratio(ebitda, revenue),
                profit_margin=_ratio(profit, revenue),
                dividends=dividends,
                dividend_payout_ratio=_ratio(dividends, profit)
            ))

        return summaries

    @staticmethod
    def expense_breakdown(annual: Optional[AnnualFinancialRecord]) -> List[ExpenseSlice]:
        """Non-zero expense and investment categories of a year, in display order."""
        if annual is None:
            return []
        slices: List[ExpenseSlice] = []
        for key, name in EXPENSE_CATEGORIES + [INVESTMENT_CATEGORY]:
            value = annual[key]  # type: ignore[literal-required]
            if value > 0:
                slices.append(ExpenseSlice(key=key, name=name, value=value))
        return slices

    @staticmethod
    def monthly_financial_rows(
        monthly_records: Dict[MonthKey, MonthlyFinancialRecord],
        year: int
    ) -> List[MonthlyFinancialRow]:
        """Twelve rows of reconciled figures for a year; absent months are zero."""
        rows: List[MonthlyFinancialRow] = []
        for index, name in enumerate(MONTH_NAMES):
            record = monthly_records.get((year, index + 1))
            rows.append(MonthlyFinancialRow(
                month=name,
                revenue=record['monthly_revenue'] if record else Decimal('0'),
                profit=record['monthly_profit'] if record else Decimal('0'),
                dividends=record['dividends'] if record else Decimal('0'),
                reserve=record['monthly_reserve'] if record else Decimal('0')
            ))
        return rows


class ProspectionSummaryCalculator:
    """Calculates prospection meeting counts."""

    @staticmethod
    def calculate(prospections: List[Prospection]) -> Dict[int, YearlyProspectionSummary]:
        """Meetings per month of every year with at least one meeting."""
        counts: Dict[int, Dict[str, int]] = defaultdict(lambda: {key: 0 for key in MONTH_KEYS})
        for prospection in prospections:
            meeting = prospection['meeting_date']
            counts[meeting.year][MONTH_KEYS[meeting.month - 1]] += 1

        return {
            year: YearlyProspectionSummary(year=year, months=months, total=sum(months.values()))
            for year, months in sorted(counts.items())
        }


def build_annual_chart_rows(
    operational: Dict[int, YearlySummary],
    reconciled: Dict[int, YearlyFinancialSummary],
    prospections: Dict[int, YearlyProspectionSummary]
) -> List[AnnualChartRow]:
    """One row per year present in any of the summaries, ascending by year."""
    years: Set[int] = set(operational) | set(reconciled) | set(prospections)
    rows: List[AnnualChartRow] = []

    for year in sorted(years):
        op = operational.get(year)
        fin = reconciled.get(year)
        pros = prospections.get(year)
        rows.append(AnnualChartRow(
            year=year,
            revenue=op['total']['revenue'] if op else Decimal('0'),
            average_ticket=op['total']['average_ticket'] if op else Decimal('0'),
            patients=op['total']['patients'] if op else 0,
            docs=op['total']['docs'] if op else 0,
            tomos=op['total']['tomos'] if op else 0,
            reconciled_revenue=fin['total']['monthly_revenue'] if fin else Decimal('0'),
            reconciled_profit=fin['total']['monthly_profit'] if fin else Decimal('0'),
            dividends=fin['total']['dividends'] if fin else Decimal('0'),
            reserve=fin['total']['monthly_reserve'] if fin else Decimal('0'),
            prospections=pros['total'] if pros else 0
        ))

    logger.debug(f"Built annual chart rows for {len(rows)} years")
    return rows
