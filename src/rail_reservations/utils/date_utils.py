"""Date utilities"""

from datetime import datetime, date
from typing import Union
import re

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_date(dt: Union[datetime, date, str]) -> str:
    """Format a date as YYYY-MM-DD"""
    if isinstance(dt, str):
        try:
            dt = datetime.strptime(dt, "%Y-%m-%d").date()
        except ValueError:
            try:
                dt = datetime.strptime(dt, "%Y/%m/%d").date()
            except ValueError:
                raise ValueError(f"Unrecognised date format: {dt}")
    elif isinstance(dt, datetime):
        dt = dt.date()

    return dt.strftime("%Y-%m-%d")


def validate_date(date_str: str) -> bool:
    """Check a YYYY-MM-DD date string"""
    pattern = r'^\d{4}-\d{2}-\d{2}$'
    if not re.match(pattern, date_str):
        return False

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
        return True
    except ValueError:
        return False


def parse_datetime(value: Union[datetime, str]) -> datetime:
    """Parse 'YYYY-MM-DD HH:MM:SS' or ISO-8601 into a datetime"""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected a datetime or a string, got {type(value).__name__}: {value!r}")
    text = value.strip()
    try:
        return datetime.strptime(text, DATETIME_FORMAT)
    except ValueError:
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Unrecognised datetime format: {value}")


def format_datetime(dt: datetime) -> str:
    return dt.strftime(DATETIME_FORMAT)


def years_before(day: date, years: int) -> date:
    """Same calendar day `years` earlier; Feb 29 rolls forward to Mar 1"""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, month=3, day=1)
