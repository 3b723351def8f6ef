"""Utilities"""

from .config import get_settings
from .date_utils import format_date, validate_date, parse_datetime, format_datetime
from .clock import Clock, SystemClock, FixedClock

__all__ = [
    "get_settings",
    "format_date",
    "validate_date",
    "parse_datetime",
    "format_datetime",
    "Clock",
    "SystemClock",
    "FixedClock",
]
