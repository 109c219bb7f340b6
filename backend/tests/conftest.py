"""
Test configuration and shared fixtures for the Clinic Insights test suite.

Snapshots are given in the persisted shape (string keys, camelCase fields,
daily months wrapped in "days") so the extractor is exercised the same way
the API uses it.
"""

import pytest
from typing import Any, Dict, List

from services.insights_extractor import SnapshotExtractor


@pytest.fixture
def daily_store() -> Dict[str, Any]:
    """
    Daily snapshot over two years.

    2023: Jan 1500 (8 patients), Mar 900 (3 patients) -> 2400
    2024: Jan 1000 + 2000 (10 + 5 patients), Feb 400 (2 patients) -> 3400
    """
    return {
        "2023": {
            "01": {"days": {"10": {"revenue": 1500, "patients": 8, "docs": 1, "tomos": 2}}},
            "03": {"days": {"15": {"revenue": 900, "patients": 3}}},
        },
        "2024": {
            "01": {"days": {
                "05": {"revenue": 1000, "patients": 10, "docs": 2, "tomos": 1},
                "20": {"revenue": 2000, "patients": 5, "docs": 1, "tomos": 0},
            }},
            "02": {"days": {"01": {"revenue": 400, "patients": 2}}},
        },
    }


@pytest.fixture
def daily_entries(daily_store):
    """Flat daily entries extracted from daily_store."""
    return SnapshotExtractor.extract_daily_entries(daily_store)


@pytest.fixture
def partner_store() -> Dict[str, Any]:
    """
    Partner snapshot (value-based).

    2024 Jan-Mar: Dra. A 500 + 700 + 200, Dra. B 300 + 600, Dr. C 100
    2023 Mar: Dra. A 400, Dra. B 600, Dr. D 50
    """
    return {
        "2023": {
            "03": [
                {"dentistName": "Dra. A", "examValue": 400},
                {"dentistName": "Dra. B", "examValue": 600},
                {"dentistName": "Dr. D", "examValue": 50},
            ],
        },
        "2024": {
            "01": [{"dentistName": "Dra. A", "examValue": 500}],
            "02": [
                {"dentistName": "Dra. A", "examValue": 700},
                {"dentistName": "Dra. B", "examValue": 300},
            ],
            "03": [
                {"dentistName": "Dra. A", "examValue": 200},
                {"dentistName": "Dra. B", "examValue": 600},
                {"dentistName": "Dr. C", "examValue": 100},
            ],
        },
    }


@pytest.fixture
def partner_batches(partner_store):
    """Partner batches extracted from partner_store."""
    return SnapshotExtractor.extract_partner_batches(partner_store)


@pytest.fixture
def monthly_financial_store() -> Dict[str, Any]:
    """Reconciled monthly figures for Dec 2023, Jan 2024 and Feb 2024."""
    return {
        "2023": {
            "12": {"monthlyRevenue": 1000, "monthlyProfit": 200, "dividends": 100, "monthlyReserve": 20},
        },
        "2024": {
            "01": {"monthlyRevenue": 2800, "monthlyProfit": 900, "dividends": 300, "monthlyReserve": 100},
            "02": {"monthlyRevenue": 400, "monthlyProfit": 100, "dividends": 0, "monthlyReserve": 50},
        },
    }


@pytest.fixture
def annual_financial_store() -> Dict[str, Any]:
    """
    Annual record for 2024.

    Expenses 500 + 100 + 200 + 0 + 150 = 950, investments 300.
    """
    return {
        "2024": {
            "rh": 500,
            "maintenance": 100,
            "material": 200,
            "marketing": 0,
            "operational": 150,
            "equipment": 300,
            "interest": 50,
            "taxes": 120,
            "dividendsAccounting": 250,
            "dividendsReal": 400,
        },
    }


@pytest.fixture
def prospection_records() -> List[Dict[str, Any]]:
    """Three prospection meetings over 2023 and 2024."""
    return [
        {"id": 1, "dentistName": "Dra. E", "meetingDate": "2024-02-10"},
        {"id": 2, "dentistName": "Dr. F", "meetingDate": "2023-11-03"},
        {"id": 3, "dentistName": "Dra. G", "meetingDate": "2024-05-21"},
    ]
