"""Seat reservation integrity engine"""

from .engine import ReservationEngine
from .errors import (
    ReservationError,
    ReferentialError,
    DuplicateRecord,
    SeatConflict,
    ValidationError,
    AgeOutOfRange,
    MalformedContact,
    IntervalOrderError,
)

__version__ = "1.0.0"

__all__ = [
    "ReservationEngine",
    "ReservationError",
    "ReferentialError",
    "DuplicateRecord",
    "SeatConflict",
    "ValidationError",
    "AgeOutOfRange",
    "MalformedContact",
    "IntervalOrderError",
]
