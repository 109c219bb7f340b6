"""
Services package for the insights business logic.

This package contains the extractor, calculators and the report engine
shared by the report endpoints.
"""

from .insights_engine import ReportFacade, CalculationValidationError

__all__ = [
    "ReportFacade",
    "CalculationValidationError",
]
