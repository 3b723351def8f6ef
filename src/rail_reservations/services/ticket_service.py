"""Ticket booking service"""

import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Set, Tuple

from ..errors import IntervalOrderError, ReferentialError
from ..models.ticket import Reservation, TicketRequest
from .catalog_service import CatalogService
from .conflict_detector import ConflictDetector
from .lifecycle import LifecycleSweeper
from .passenger_service import PassengerStore

logger = logging.getLogger(__name__)

SeatKey = Tuple[str, str, int]


class ReservationStore:
    """Ticket rows with a (train, coach, seat) index and a passenger index"""

    def __init__(self):
        self._rows: Dict[int, Reservation] = {}
        self._by_seat: Dict[SeatKey, Set[int]] = defaultdict(set)
        self._by_passenger: Dict[int, Set[int]] = defaultdict(set)
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._rows)

    def next_id(self) -> int:
        ticket_id = self._next_id
        self._next_id += 1
        return ticket_id

    def all(self) -> List[Reservation]:
        return list(self._rows.values())

    def get(self, ticket_id: int) -> Reservation:
        reservation = self._rows.get(ticket_id)
        if reservation is None:
            raise ReferentialError(f"Unknown ticket: {ticket_id}")
        return reservation

    def for_seat(self, train_name: str, coach: str, seat: int) -> List[Reservation]:
        return [self._rows[i] for i in sorted(self._by_seat.get((train_name, coach, seat), ()))]

    def for_passenger(self, passenger_id: int) -> List[Reservation]:
        return [self._rows[i] for i in sorted(self._by_passenger.get(passenger_id, ()))]

    def references_stop(self, train_name: str, station: str) -> bool:
        return any(
            r.train_name == train_name and station in (r.departure_station, r.arrival_station)
            for r in self._rows.values()
        )

    def put(self, reservation: Reservation) -> None:
        if reservation.id in self._rows:
            self._unindex(self._rows[reservation.id])
        self._rows[reservation.id] = reservation
        self._by_seat[reservation.seat_key].add(reservation.id)
        self._by_passenger[reservation.passenger_id].add(reservation.id)

    def remove(self, ticket_id: int) -> Reservation:
        reservation = self.get(ticket_id)
        self._unindex(reservation)
        del self._rows[ticket_id]
        return reservation

    def _unindex(self, reservation: Reservation) -> None:
        seat_ids = self._by_seat[reservation.seat_key]
        seat_ids.discard(reservation.id)
        if not seat_ids:
            del self._by_seat[reservation.seat_key]
        passenger_ids = self._by_passenger[reservation.passenger_id]
        passenger_ids.discard(reservation.id)
        if not passenger_ids:
            del self._by_passenger[reservation.passenger_id]

    def rename_train(self, old_name: str, new_name: str) -> int:
        renamed = [r for r in self._rows.values() if r.train_name == old_name]
        for reservation in renamed:
            self.put(reservation.model_copy(update={"train_name": new_name}))
        return len(renamed)


def check_interval(departure: datetime, arrival: Optional[datetime], fare: Decimal) -> None:
    if arrival is not None and arrival <= departure:
        raise IntervalOrderError(f"Arrival {arrival} is not after departure {departure}")
    if fare <= 0:
        raise IntervalOrderError(f"Fare must be positive, got {fare}")


class TicketService:
    """Booking pipeline: references, interval, seat conflict, write, sweep"""

    def __init__(self, store: ReservationStore, passengers: PassengerStore, catalog: CatalogService):
        self.store = store
        self.passengers = passengers
        self.catalog = catalog
        self.detector = ConflictDetector(store)
        self.sweeper = LifecycleSweeper(store)

    def _check_references(self, request: TicketRequest) -> None:
        train = self.catalog.get_train(request.train_name)
        if not self.passengers.exists(request.passenger_id):
            raise ReferentialError(f"Unknown passenger: {request.passenger_id}")
        if not self.catalog.has_coach(request.coach):
            raise ReferentialError(f"Unknown coach: {request.coach}")
        for station in (request.departure_station, request.arrival_station):
            if station not in train.stops:
                raise ReferentialError(f"{train.name} does not stop at {station}")

    def book(self, request: TicketRequest, now: datetime) -> Reservation:
        self._check_references(request)
        check_interval(request.departure, request.arrival, request.fare)
        self.detector.check_conflict(request.train_name, request.coach, request.seat,
                                     request.departure, request.arrival)

        reservation = Reservation(id=self.store.next_id(), **request.model_dump())
        self.store.put(reservation)
        logger.info(f"Ticket {reservation.id} booked: {reservation.train_name} "
                    f"{reservation.coach}-{reservation.seat} {reservation.departure}")
        self.sweeper.sweep_expired(now)
        return reservation

    def reschedule(self, ticket_id: int, now: datetime, new_seat: Optional[int] = None,
                   new_interval: Optional[Tuple[datetime, Optional[datetime]]] = None) -> Reservation:
        current = self.store.get(ticket_id)
        update = {}
        if new_seat is not None:
            update["seat"] = new_seat
        if new_interval is not None:
            update["departure"], update["arrival"] = new_interval
        changed = Reservation.model_validate({**current.model_dump(), **update})

        check_interval(changed.departure, changed.arrival, changed.fare)
        self.detector.check_conflict(changed.train_name, changed.coach, changed.seat,
                                     changed.departure, changed.arrival, exclude=ticket_id)

        self.store.put(changed)
        logger.info(f"Ticket {ticket_id} rescheduled: {changed.coach}-{changed.seat} "
                    f"{changed.departure} - {changed.arrival}")
        self.sweeper.sweep_expired(now)
        return changed

    def cancel(self, ticket_id: int) -> Reservation:
        reservation = self.store.remove(ticket_id)
        logger.info(f"Ticket {ticket_id} cancelled")
        return reservation

    def remove_for_passenger(self, passenger_id: int) -> int:
        """Cascade for passenger deletion"""
        tickets = self.store.for_passenger(passenger_id)
        for reservation in tickets:
            self.store.remove(reservation.id)
        return len(tickets)
