"""
Filters for the insights listings.

Search over the daily entries log, dentist lookup and prospection grouping.
"""
from typing import List, Optional, Dict

from services.insights_types import DailyEntry, DailyLogEntry, Prospection, ProspectionYearGroup


class EntryFilter:
    """
    Filters and orders listing data.

    Handles:
    - Date search on the entries log (ISO "2024-01" or "05/01/2024" fragments)
    - Exact dentist name lookup
    - Prospection grouping by meeting year
    """

    @staticmethod
    def list_daily_entries(
        entries: List[DailyEntry],
        search_term: Optional[str] = None
    ) -> List[DailyLogEntry]:
        """
        List daily entries newest first, optionally narrowed by a date search.

        The search term matches when it is a fragment of the ISO date (with any
        "/" read as "-") or of the dd/mm/yyyy rendering of the date.

        Args:
            entries: Flat daily entries
            search_term: Free text typed by the user; empty means no filter

        Returns:
            Matching entries sorted by date descending
        """
        ordered = sorted(entries, key=lambda e: e['date'], reverse=True)

        if search_term:
            ordered = [
                entry for entry in ordered
                if EntryFilter._matches_date(entry, search_term)
            ]

        return [
            DailyLogEntry(
                date=entry['date'].isoformat(),
                patients=entry['record']['patient_count'],
                revenue=entry['record']['revenue'],
                docs=entry['record']['doc_count'],
                tomos=entry['record']['tomo_count']
            )
            for entry in ordered
        ]

    @staticmethod
    def _matches_date(entry: DailyEntry, search_term: str) -> bool:
        iso = entry['date'].isoformat()
        formatted = entry['date'].strftime('%d/%m/%Y')
        normalized = search_term.replace('/', '-')
        return normalized in iso or search_term in formatted

    @staticmethod
    def resolve_dentist(term: Optional[str], names: List[str]) -> Optional[str]:
        """Return the dentist name equal to term, or None when there is no such dentist."""
        if not term:
            return None
        return term if term in names else None

    @staticmethod
    def group_prospections_by_year(prospections: List[Prospection]) -> List[ProspectionYearGroup]:
        """
        Group prospections by meeting year.

        Returns:
            Groups sorted by year descending; each group newest meeting first
        """
        ordered = sorted(prospections, key=lambda p: p['meeting_date'], reverse=True)

        groups: Dict[int, List[Prospection]] = {}
        for prospection in ordered:
            groups.setdefault(prospection['meeting_date'].year, []).append(prospection)

        return [
            ProspectionYearGroup(year=year, prospections=groups[year])
            for year in sorted(groups, reverse=True)
        ]
