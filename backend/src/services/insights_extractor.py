"""
Snapshot extractor for insights calculations.

Flattens the string-keyed, sparse snapshots handed over by the persistence
layer ({"2024": {"01": {"05": {...}}}}) into flat typed records keyed by real
dates or (year, month) tuples, validating every key on the way.
"""
from typing import List, Dict, Any, Iterable, Tuple, Optional
from datetime import date
from decimal import Decimal
import logging

from services.insights_types import (
    DailyEntry,
    DailyRecord,
    MonthlyFinancialRecord,
    AnnualFinancialRecord,
    PartnerEntry,
    Prospection,
    MonthKey,
)
from utils.datetime_utils import to_date
from utils.insights_validators import (
    ValidationError,
    validate_year_key,
    validate_month_key,
    validate_day_key,
    parse_amount,
    parse_non_negative_amount,
    parse_count,
)

logger = logging.getLogger(__name__)

# Accepted field names per record field: internal snake_case name first,
# then the names used by the persisted data
DAILY_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    'patient_count': ('patient_count', 'patients', 'patientCount'),
    'revenue': ('revenue',),
    'doc_count': ('doc_count', 'docs', 'docCount'),
    'tomo_count': ('tomo_count', 'tomos', 'tomoCount'),
}

MONTHLY_FINANCIAL_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    'monthly_revenue': ('monthly_revenue', 'monthlyRevenue'),
    'monthly_profit': ('monthly_profit', 'monthlyProfit'),
    'dividends': ('dividends',),
    'monthly_reserve': ('monthly_reserve', 'monthlyReserve'),
}

ANNUAL_FINANCIAL_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    'rh': ('rh',),
    'maintenance': ('maintenance',),
    'material': ('material',),
    'marketing': ('marketing',),
    'operational': ('operational',),
    'equipment': ('equipment',),
    'interest': ('interest',),
    'taxes': ('taxes',),
    'dividends_accounting': ('dividends_accounting', 'dividendsAccounting'),
    'dividends_real': ('dividends_real', 'dividendsReal'),
}

DENTIST_NAME_ALIASES = ('dentist_name', 'dentistName')

# Partner metric -> accepted field names
PARTNER_METRIC_ALIASES: Dict[str, Tuple[str, ...]] = {
    'exam_value': ('exam_value', 'examValue', 'value'),
    'exam_count': ('exam_count', 'examCount', 'value'),
}


def _pick(raw: Dict[str, Any], aliases: Iterable[str]) -> Any:
    """Return the first alias present in raw, or None."""
    for alias in aliases:
        if alias in raw:
            return raw[alias]
    return None


def _require_mapping(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ValidationError(f"Expected a mapping at {where}, got {type(value).__name__}")
    return value


class SnapshotExtractor:
    """
    Extracts flat records from store snapshots.

    Handles:
    - Year/month/day key validation (ValidationError on anything off-calendar)
    - Persisted field names (camelCase) and internal ones (snake_case)
    - Missing fields (counted as zero)
    - The persisted daily shape that wraps days in a "days" mapping
    """

    @staticmethod
    def extract_daily_entries(store: Optional[Dict[str, Any]]) -> List[DailyEntry]:
        """
        Flatten a daily store into a date-sorted list of entries.

        Args:
            store: {year: {month: {day: record}}} or {year: {month: {"days": {day: record}}}}

        Returns:
            List of DailyEntry sorted by date ascending
        """
        entries: List[DailyEntry] = []
        if not store:
            return entries

        for year_key, months in store.items():
            year = validate_year_key(year_key)
            months = _require_mapping(months, f"daily[{year_key}]")
            for month_key, month_data in months.items():
                month = validate_month_key(month_key)
                month_data = _require_mapping(month_data, f"daily[{year_key}][{month_key}]")
                days = month_data['days'] if 'days' in month_data else month_data
                days = _require_mapping(days, f"daily[{year_key}][{month_key}].days")
                for day_key, raw in days.items():
                    entry_date = validate_day_key(year, month, day_key)
                    record = SnapshotExtractor.extract_daily_record(
                        _require_mapping(raw, f"daily[{entry_date.isoformat()}]")
                    )
                    entries.append(DailyEntry(date=entry_date, record=record))

        entries.sort(key=lambda e: e['date'])
        logger.debug(f"Extracted {len(entries)} daily entries from {len(store)} years")
        return entries

    @staticmethod
    def extract_daily_record(raw: Dict[str, Any]) -> DailyRecord:
        """Build a DailyRecord from a raw mapping; missing fields are zero."""
        return DailyRecord(
            patient_count=parse_count(_pick(raw, DAILY_FIELD_ALIASES['patient_count']), 'patient_count'),
            revenue=parse_non_negative_amount(_pick(raw, DAILY_FIELD_ALIASES['revenue']), 'revenue'),
            doc_count=parse_count(_pick(raw, DAILY_FIELD_ALIASES['doc_count']), 'doc_count'),
            tomo_count=parse_count(_pick(raw, DAILY_FIELD_ALIASES['tomo_count']), 'tomo_count'),
        )

    @staticmethod
    def extract_monthly_financials(
        store: Optional[Dict[str, Any]]
    ) -> Dict[MonthKey, MonthlyFinancialRecord]:
        """
        Flatten a monthly financial store.

        At most one record per (year, month) exists by construction of the mapping.
        """
        result: Dict[MonthKey, MonthlyFinancialRecord] = {}
        if not store:
            return result

        for year_key, months in store.items():
            year = validate_year_key(year_key)
            months = _require_mapping(months, f"monthly_financials[{year_key}]")
            for month_key, raw in months.items():
                month = validate_month_key(month_key)
                raw = _require_mapping(raw, f"monthly_financials[{year_key}][{month_key}]")
                result[(year, month)] = MonthlyFinancialRecord(
                    monthly_revenue=parse_amount(_pick(raw, MONTHLY_FINANCIAL_FIELD_ALIASES['monthly_revenue']), 'monthly_revenue'),
                    monthly_profit=parse_amount(_pick(raw, MONTHLY_FINANCIAL_FIELD_ALIASES['monthly_profit']), 'monthly_profit'),
                    dividends=parse_amount(_pick(raw, MONTHLY_FINANCIAL_FIELD_ALIASES['dividends']), 'dividends'),
                    monthly_reserve=parse_amount(_pick(raw, MONTHLY_FINANCIAL_FIELD_ALIASES['monthly_reserve']), 'monthly_reserve'),
                )
        return result

    @staticmethod
    def extract_annual_financials(
        store: Optional[Dict[str, Any]]
    ) -> Dict[int, AnnualFinancialRecord]:
        """Flatten an annual financial store keyed by year."""
        result: Dict[int, AnnualFinancialRecord] = {}
        if not store:
            return result

        for year_key, raw in store.items():
            year = validate_year_key(year_key)
            raw = _require_mapping(raw, f"annual_financials[{year_key}]")
            values = {
                field: parse_amount(_pick(raw, aliases), field)
                for field, aliases in ANNUAL_FINANCIAL_FIELD_ALIASES.items()
            }
            result[year] = AnnualFinancialRecord(**values)  # type: ignore[typeddict-item]
        return result

    @staticmethod
    def extract_partner_batches(
        store: Optional[Dict[str, Any]],
        metric: str = 'exam_value'
    ) -> Dict[MonthKey, List[PartnerEntry]]:
        """
        Flatten a partner store into one batch per (year, month).

        Args:
            store: {year: {month: [{dentistName, examValue | examCount}]}}
            metric: 'exam_value' for the value-based upload, 'exam_count' for the by-exams one

        Returns:
            Mapping of (year, month) to that month's partner entries, in upload order
        """
        if metric not in PARTNER_METRIC_ALIASES:
            raise ValidationError(f"Unknown partner metric: {metric!r}")
        aliases = PARTNER_METRIC_ALIASES[metric]

        batches: Dict[MonthKey, List[PartnerEntry]] = {}
        if not store:
            return batches

        for year_key, months in store.items():
            year = validate_year_key(year_key)
            months = _require_mapping(months, f"partners[{year_key}]")
            for month_key, records in months.items():
                month = validate_month_key(month_key)
                if not isinstance(records, list):
                    raise ValidationError(
                        f"Expected a list of partner records at partners[{year_key}][{month_key}]"
                    )
                batch: List[PartnerEntry] = []
                for raw in records:
                    raw = _require_mapping(raw, f"partners[{year_key}][{month_key}][]")
                    name = _pick(raw, DENTIST_NAME_ALIASES)
                    if name is None:
                        raise ValidationError(
                            f"Partner record without dentist name at partners[{year_key}][{month_key}]"
                        )
                    if metric == 'exam_count':
                        value = Decimal(parse_count(_pick(raw, aliases), metric))
                    else:
                        value = parse_amount(_pick(raw, aliases), metric)
                    batch.append(PartnerEntry(dentist_name=str(name), value=value))
                batches[(year, month)] = batch

        logger.debug(f"Extracted {len(batches)} partner batches ({metric})")
        return batches

    @staticmethod
    def extract_prospections(records: Optional[List[Dict[str, Any]]]) -> List[Prospection]:
        """Parse prospection records; meeting dates must be ISO dates."""
        prospections: List[Prospection] = []
        if not records:
            return prospections

        for raw in records:
            raw = _require_mapping(raw, "prospections[]")
            meeting = _pick(raw, ('meeting_date', 'meetingDate'))
            if meeting is None:
                raise ValidationError(f"Prospection without meeting date: {raw!r}")
            meeting_date: date = to_date(meeting)
            try:
                prospection_id = int(raw.get('id', 0))
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Invalid prospection id: {raw.get('id')!r}") from e
            prospections.append(Prospection(
                id=prospection_id,
                dentist_name=str(_pick(raw, DENTIST_NAME_ALIASES) or ''),
                meeting_date=meeting_date,
            ))
        return prospections
