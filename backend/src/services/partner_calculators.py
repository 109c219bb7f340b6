"""
Partner (referring dentist) calculators.

Aggregates monthly partner upload batches per dentist and builds the
two-period evolution report: comparison rows, growth and decline rankings,
and per-dentist monthly/annual series.

A batch keyed (year, month) stands for the whole calendar month. For period
totals the month counts when it overlaps the requested range, while the
per-dentist monthly series counts a month when its 15th day falls inside the
range.
"""
from typing import List, Dict, Optional, Set
from datetime import date
from decimal import Decimal
from collections import defaultdict
import logging

from core.constants import MONTH_KEYS, PARTNER_SERIES_ANCHOR_DAY
from services.insights_calculators import GrowthCalculator
from services.insights_types import (
    MonthKey,
    PartnerEntry,
    PartnerTotal,
    PartnerComparison,
    AnnualPoint,
)
from utils.datetime_utils import DateLike, to_date, month_start, month_end
from utils.insights_validators import validate_date_range, validate_decline_reason

logger = logging.getLogger(__name__)

PartnerBatches = Dict[MonthKey, List[PartnerEntry]]


def _month_overlaps(key: MonthKey, start: date, end: date) -> bool:
    year, month = key
    return month_start(year, month) <= end and month_end(year, month) >= start


def _sorted_totals(totals: Dict[str, Decimal]) -> List[PartnerTotal]:
    # Highest total first; equal totals ordered by name so rankings are deterministic
    ordered = sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))
    return [PartnerTotal(dentist_name=name, total_value=value) for name, value in ordered]


class PartnerAggregator:
    """Calculates per-dentist totals, comparisons and rankings."""

    @staticmethod
    def aggregate_by_period(
        batches: PartnerBatches,
        start_date: DateLike,
        end_date: DateLike
    ) -> List[PartnerTotal]:
        """
        Total value per dentist over every month overlapping [start_date, end_date].

        Names are matched exactly (no trimming or case folding).

        Returns:
            PartnerTotal list sorted by total descending (ties by name)

        Raises:
            ValidationError: If a date string is malformed or end_date < start_date
        """
        start = to_date(start_date)
        end = to_date(end_date)
        validate_date_range(start, end)

        totals: Dict[str, Decimal] = defaultdict(Decimal)
        included_months = 0
        for key, records in batches.items():
            if not _month_overlaps(key, start, end):
                continue
            included_months += 1
            for record in records:
                totals[record['dentist_name']] += record['value']

        logger.debug(
            f"Aggregated {len(totals)} dentists from {included_months} partner months "
            f"for {start} to {end}"
        )
        return _sorted_totals(totals)

    @staticmethod
    def compare_two_periods(
        period1: List[PartnerTotal],
        period2: List[PartnerTotal]
    ) -> List[PartnerComparison]:
        """
        Compare the analysis period (period1) against the comparison period (period2).

        Every dentist present in either period appears once; a missing side is 0.
        change = value_p1 - value_p2 and percent_change is the growth of p1 over p2.

        Returns:
            Comparison rows sorted by value_p1 descending (ties by name)
        """
        p1 = {item['dentist_name']: item['total_value'] for item in period1}
        p2 = {item['dentist_name']: item['total_value'] for item in period2}

        rows: List[PartnerComparison] = []
        for name in set(p1) | set(p2):
            value_p1 = p1.get(name, Decimal('0'))
            value_p2 = p2.get(name, Decimal('0'))
            rows.append(PartnerComparison(
                dentist_name=name,
                value_p1=value_p1,
                value_p2=value_p2,
                change=value_p1 - value_p2,
                percent_change=GrowthCalculator.percent_change(value_p1, value_p2)
            ))

        rows.sort(key=lambda r: (-r['value_p1'], r['dentist_name']))
        return rows

    @staticmethod
    def rank_growth(comparison: List[PartnerComparison]) -> List[PartnerComparison]:
        """Dentists with change > 0, biggest gain first."""
        growing = [row for row in comparison if row['change'] > 0]
        return sorted(growing, key=lambda r: (-r['change'], r['dentist_name']))

    @staticmethod
    def rank_decline(comparison: List[PartnerComparison]) -> List[PartnerComparison]:
        """Dentists with change < 0, most severe decline first."""
        declining = [row for row in comparison if row['change'] < 0]
        return sorted(declining, key=lambda r: (r['change'], r['dentist_name']))

    @staticmethod
    def monthly_time_series(
        batches: PartnerBatches,
        dentist_name: str,
        start_date: DateLike,
        end_date: DateLike
    ) -> Dict[str, Decimal]:
        """
        One dentist's value per calendar month within a range.

        Months of different years are merged by month number, which lets a
        chart lay two periods over the same Jan..Dec axis.

        Returns:
            Mapping "01".."12" -> total (all 12 keys present)
        """
        start = to_date(start_date)
        end = to_date(end_date)
        validate_date_range(start, end)

        series: Dict[str, Decimal] = {key: Decimal('0') for key in MONTH_KEYS}
        for (year, month), records in batches.items():
            anchor = date(year, month, PARTNER_SERIES_ANCHOR_DAY)
            if not (start <= anchor <= end):
                continue
            for record in records:
                if record['dentist_name'] == dentist_name:
                    series[MONTH_KEYS[month - 1]] += record['value']
        return series

    @staticmethod
    def annual_time_series(batches: PartnerBatches, dentist_name: str) -> List[AnnualPoint]:
        """
        One dentist's total per year, ascending by year.

        Years where the dentist totals zero are left out.
        """
        yearly: Dict[int, Decimal] = defaultdict(Decimal)
        for (year, _month), records in batches.items():
            for record in records:
                if record['dentist_name'] == dentist_name:
                    yearly[year] += record['value']

        return [
            AnnualPoint(year=year, total=total)
            for year, total in sorted(yearly.items())
            if total > 0
        ]

    @staticmethod
    def unique_dentists(batches: PartnerBatches) -> List[str]:
        """All dentist names across every batch, sorted alphabetically."""
        names: Set[str] = set()
        for records in batches.values():
            for record in records:
                names.add(record['dentist_name'])
        return sorted(names)


def build_decline_key(period1_end: DateLike, dentist_name: str) -> str:
    """
    Composite key under which a decline reason is stored.

    A reason belongs to one dentist in one analysis period, identified by
    that period's end date: "2024-03-31_Dra. A".
    """
    return f"{to_date(period1_end).isoformat()}_{dentist_name}"


def apply_decline_reason(
    reasons: Dict[str, str],
    key: str,
    reason: str
) -> Dict[str, str]:
    """
    Return a new reasons mapping with the reason for key set or cleared.

    An empty reason removes the key. The input mapping is not modified.

    Raises:
        ValidationError: If reason is not one of the known decline reasons
    """
    reason = validate_decline_reason(reason)
    updated = dict(reasons)
    if reason == '':
        updated.pop(key, None)
    else:
        updated[key] = reason
    return updated


def lookup_decline_reason(reasons: Optional[Dict[str, str]], key: str) -> str:
    """Reason stored for key, or '' when none was recorded."""
    if not reasons:
        return ''
    return reasons.get(key, '')
