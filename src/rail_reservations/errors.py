"""Reservation engine errors"""

from datetime import datetime
from typing import Optional


class ReservationError(Exception):
    """Base class for every rejected mutation"""


class ReferentialError(ReservationError):
    """A referenced station, train, coach, passenger or ticket is missing or still in use"""


class DuplicateRecord(ReservationError):
    """A record with the same key already exists"""


class ValidationError(ReservationError):
    """A record failed field validation"""


class AgeOutOfRange(ValidationError):
    """Date of birth outside the accepted age window"""


class MalformedContact(ValidationError):
    """Phone number does not have the required shape"""


class IntervalOrderError(ValidationError):
    """Arrival not after departure, or fare not positive"""


class SeatConflict(ReservationError):
    """Seat already booked during the requested period"""

    def __init__(self, ticket_id: int, departure: datetime, arrival: Optional[datetime]):
        self.ticket_id = ticket_id
        self.departure = departure
        self.arrival = arrival
        window = f"{departure} - {arrival if arrival is not None else 'open'}"
        super().__init__(f"Seat already booked during the specified time period (ticket {ticket_id}: {window})")
