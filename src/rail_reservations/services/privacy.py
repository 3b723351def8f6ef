"""Privacy-preserving read views"""

from datetime import datetime
from typing import List, Optional

from ..models.passenger import Passenger, PassengerView
from ..models.ticket import Reservation, TicketView, TrainStop
from .lifecycle import is_active


def mask_phone(phone_number: str, mask: str = "******") -> str:
    return mask + phone_number[-4:]


class PrivacyProjector:
    """Read-only views over the passenger and reservation stores"""

    def __init__(self, passengers, reservations, catalog, mask: str = "******"):
        self.passengers = passengers
        self.reservations = reservations
        self.catalog = catalog
        self.mask = mask

    def _active(self, now: datetime) -> List[Reservation]:
        return [r for r in self.reservations.all() if is_active(r, now)]

    def passenger_view(self, passenger: Passenger) -> PassengerView:
        return PassengerView(
            id=passenger.id,
            first_name=passenger.first_name,
            last_name=passenger.last_name,
            date_of_birth=passenger.date_of_birth,
            email=passenger.email,
            phone_number=mask_phone(passenger.phone_number, self.mask),
        )

    def ticket_view(self, reservation: Reservation, passenger: Passenger) -> TicketView:
        return TicketView(
            id=reservation.id,
            passenger_id=reservation.passenger_id,
            name=passenger.full_name,
            phone_number=mask_phone(passenger.phone_number, self.mask),
            train_name=reservation.train_name,
            departure_station=reservation.departure_station,
            arrival_station=reservation.arrival_station,
            departure=reservation.departure,
            arrival=reservation.arrival,
            coach=reservation.coach,
            seat=reservation.seat,
            fare=reservation.fare,
        )

    def active_passengers(self, now: datetime) -> List[PassengerView]:
        """Passengers holding at least one active ticket"""
        holders = {r.passenger_id for r in self._active(now)}
        return [self.passenger_view(p) for p in self.passengers.all() if p.id in holders]

    def active_tickets(self, now: datetime, train_name: Optional[str] = None,
                       passenger_id: Optional[int] = None) -> List[TicketView]:
        views = []
        for reservation in self._active(now):
            if train_name is not None and reservation.train_name != train_name:
                continue
            if passenger_id is not None and reservation.passenger_id != passenger_id:
                continue
            views.append(self.ticket_view(reservation, self.passengers.get(reservation.passenger_id)))
        return views

    def train_stops(self, train_name: str, now: datetime) -> List[TrainStop]:
        """Stops of a train where an active ticket departs, in route order"""
        route = self.catalog.route(train_name)
        position = {station: i for i, station in enumerate(route)}
        stops = [
            TrainStop(station=r.departure_station, departure=r.departure)
            for r in self._active(now)
            if r.train_name == train_name and r.departure_station in position
        ]
        stops.sort(key=lambda s: (position[s.station], s.departure))
        return stops
