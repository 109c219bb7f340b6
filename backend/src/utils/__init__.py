"""
Utility modules for the clinic insights application.

This package contains shared utility functions and helpers used across
the application, including datetime utilities and input validation helpers.
"""

from utils.insights_validators import ValidationError

__all__ = ['ValidationError']
