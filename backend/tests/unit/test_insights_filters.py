"""
Unit tests for the insights listing filters.
"""
from datetime import date
from decimal import Decimal

from services.insights_extractor import SnapshotExtractor
from services.insights_filters import EntryFilter


class TestListDailyEntries:
    """Test the entries log listing and search."""

    def test_newest_first(self, daily_entries):
        """Test that entries are listed by date descending."""
        listed = EntryFilter.list_daily_entries(daily_entries)

        assert [e['date'] for e in listed] == [
            '2024-02-01', '2024-01-20', '2024-01-05', '2023-03-15', '2023-01-10'
        ]
        assert listed[0] == {
            'date': '2024-02-01',
            'patients': 2,
            'revenue': Decimal('400'),
            'docs': 0,
            'tomos': 0,
        }

    def test_iso_search(self, daily_entries):
        """Test ISO fragments, with "/" read as "-"."""
        assert [e['date'] for e in EntryFilter.list_daily_entries(daily_entries, '2024-01')] == [
            '2024-01-20', '2024-01-05'
        ]
        assert [e['date'] for e in EntryFilter.list_daily_entries(daily_entries, '2023/03')] == [
            '2023-03-15'
        ]

    def test_brazilian_date_search(self, daily_entries):
        """Test dd/mm/yyyy fragments."""
        assert [e['date'] for e in EntryFilter.list_daily_entries(daily_entries, '20/01')] == [
            '2024-01-20'
        ]
        assert [e['date'] for e in EntryFilter.list_daily_entries(daily_entries, '10/01/2023')] == [
            '2023-01-10'
        ]

    def test_no_match(self, daily_entries):
        """Test that an unmatched search gives an empty list."""
        assert EntryFilter.list_daily_entries(daily_entries, '1999') == []

    def test_empty_search_lists_all(self, daily_entries):
        """Test that an empty search term does not filter."""
        assert len(EntryFilter.list_daily_entries(daily_entries, '')) == 5


class TestResolveDentist:
    """Test dentist lookup."""

    def test_exact_match(self):
        """Test that only exact names resolve."""
        names = ['Dr. C', 'Dra. A']
        assert EntryFilter.resolve_dentist('Dra. A', names) == 'Dra. A'
        assert EntryFilter.resolve_dentist('dra. a', names) is None
        assert EntryFilter.resolve_dentist('', names) is None
        assert EntryFilter.resolve_dentist(None, names) is None


class TestGroupProspectionsByYear:
    """Test prospection grouping."""

    def test_groups(self, prospection_records):
        """Test years descending with newest meeting first."""
        prospections = SnapshotExtractor.extract_prospections(prospection_records)
        groups = EntryFilter.group_prospections_by_year(prospections)

        assert [g['year'] for g in groups] == [2024, 2023]
        assert [p['meeting_date'] for p in groups[0]['prospections']] == [
            date(2024, 5, 21), date(2024, 2, 10)
        ]
        assert [p['id'] for p in groups[1]['prospections']] == [2]

    def test_empty(self):
        """Test that no prospections give no groups."""
        assert EntryFilter.group_prospections_by_year([]) == []
