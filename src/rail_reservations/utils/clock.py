"""Evaluation clock"""

from abc import ABC, abstractmethod
from datetime import datetime, date, timedelta

import pytz


class Clock(ABC):
    """
    Source of the evaluation time.

    Stored reservation times are naive wall-clock times in the deployment's
    zone, so every comparison goes through local_now().
    """

    def __init__(self, timezone: str = "Asia/Kolkata"):
        self.tz = pytz.timezone(timezone)

    @abstractmethod
    def utcnow(self) -> datetime:
        """Current instant, timezone-aware UTC"""

    def local_now(self) -> datetime:
        """Current wall-clock time in the configured zone (naive)"""
        return self.utcnow().astimezone(self.tz).replace(tzinfo=None)

    def today(self) -> date:
        return self.local_now().date()

    def to_local(self, dt: datetime) -> datetime:
        """Convert an aware datetime to naive local time; naive values pass through"""
        if dt.tzinfo is None:
            return dt
        return dt.astimezone(self.tz).replace(tzinfo=None)


class SystemClock(Clock):
    """Reads the system time"""

    def utcnow(self) -> datetime:
        return datetime.now(pytz.utc)


class FixedClock(Clock):
    """Clock pinned to a given instant, for replay and tests"""

    def __init__(self, instant: datetime, timezone: str = "Asia/Kolkata"):
        super().__init__(timezone)
        self._instant = self._as_utc(instant)

    def _as_utc(self, instant: datetime) -> datetime:
        # naive instants are read as local wall-clock time
        if instant.tzinfo is None:
            instant = self.tz.localize(instant)
        return instant.astimezone(pytz.utc)

    def utcnow(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = self._as_utc(instant)

    def advance(self, **delta) -> None:
        self._instant = self._instant + timedelta(**delta)

    def __repr__(self) -> str:
        return f"FixedClock({self.local_now().isoformat()} {self.tz.zone})"

