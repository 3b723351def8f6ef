"""Seat conflict detection"""

from datetime import datetime
from typing import Iterable, Optional

from ..errors import SeatConflict
from ..models.ticket import Reservation


def intervals_overlap(departure: datetime, arrival: Optional[datetime],
                      other_departure: datetime, other_arrival: Optional[datetime]) -> bool:
    """
    Whether two seat occupations share any instant.

    A booking with an arrival occupies [departure, arrival); bookings that
    only touch at a boundary do not overlap. A booking without an arrival
    occupies the seat at its departure instant only.
    """
    if arrival is None and other_arrival is None:
        return departure == other_departure
    if arrival is None:
        return other_departure <= departure < other_arrival
    if other_arrival is None:
        return departure <= other_departure < arrival
    return departure < other_arrival and other_departure < arrival


class ConflictDetector:
    """Decides whether a candidate booking collides with an existing one on the same seat"""

    def __init__(self, store):
        self.store = store

    def find_conflict(self, train_name: str, coach: str, seat: int,
                      departure: datetime, arrival: Optional[datetime] = None,
                      exclude: Optional[int] = None) -> Optional[Reservation]:
        candidates: Iterable[Reservation] = self.store.for_seat(train_name, coach, seat)
        for existing in candidates:
            if existing.id == exclude:
                continue
            if intervals_overlap(departure, arrival, existing.departure, existing.arrival):
                return existing
        return None

    def check_conflict(self, train_name: str, coach: str, seat: int,
                       departure: datetime, arrival: Optional[datetime] = None,
                       exclude: Optional[int] = None) -> None:
        existing = self.find_conflict(train_name, coach, seat, departure, arrival, exclude)
        if existing is not None:
            raise SeatConflict(existing.id, existing.departure, existing.arrival)
