"""Reservation integrity engine"""

import json
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import aiofiles
from pydantic import ValidationError as PydanticValidationError

from .errors import ReferentialError, ReservationError, ValidationError
from .models.passenger import Passenger, PassengerFields, PassengerUpdate, PassengerView
from .models.ticket import Reservation, TicketRequest, TicketView, TrainStop
from .services.catalog_service import CatalogService
from .services.passenger_service import PassengerStore
from .services.privacy import PrivacyProjector
from .services.ticket_service import ReservationStore, TicketService
from .services.validation import ValidationGate
from .utils.clock import Clock, SystemClock
from .utils.config import Settings, get_settings
from .utils.date_utils import parse_datetime

logger = logging.getLogger(__name__)

TimeValue = Union[datetime, str]


class ReservationEngine:
    """
    Public entry point for every passenger and ticket mutation and read.

    Each mutation runs as one unit of work under a single lock:
    validate -> detect seat conflict -> write -> sweep expired tickets.
    All checks happen before the first write, so a rejected call leaves
    the stores untouched.
    """

    def __init__(self, catalog: Optional[CatalogService] = None, clock: Optional[Clock] = None,
                 settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock(self.settings.local_timezone)
        self.catalog = catalog or CatalogService()
        self.gate = ValidationGate(self.settings.min_age_years, self.settings.max_age_years)
        self.reservations = ReservationStore()
        self.passengers = PassengerStore(self.gate)
        self.tickets = TicketService(self.reservations, self.passengers, self.catalog)
        self.passengers.on_delete = self.tickets.remove_for_passenger
        self.projector = PrivacyProjector(self.passengers, self.reservations, self.catalog,
                                          self.settings.phone_mask)
        self._lock = threading.RLock()

    @contextmanager
    def _mutation(self, action: str) -> Iterator[datetime]:
        with self._lock:
            try:
                yield self.clock.local_now()
            except PydanticValidationError as e:
                logger.warning(f"{action} rejected: invalid input")
                raise ValidationError(f"Invalid {action} input: {e}") from e
            except ReservationError as e:
                logger.warning(f"{action} rejected: {e}")
                raise

    def _local(self, value: Optional[TimeValue]) -> Optional[datetime]:
        if value is None:
            return None
        try:
            return self.clock.to_local(parse_datetime(value))
        except ValueError as e:
            raise ValidationError(str(e)) from e

    # passengers

    def create_passenger(self, fields: Union[PassengerFields, Dict[str, Any]]) -> int:
        with self._mutation("create passenger") as now:
            record = PassengerFields.model_validate(fields)
            return self.passengers.create(record, now.date()).id

    def update_passenger(self, passenger_id: int,
                         fields: Union[PassengerUpdate, Dict[str, Any]]) -> Passenger:
        with self._mutation("update passenger") as now:
            update = PassengerUpdate.model_validate(fields)
            return self.passengers.update(passenger_id, update, now.date())

    def delete_passenger(self, passenger_id: int) -> int:
        with self._mutation("delete passenger"):
            return self.passengers.delete(passenger_id)

    def get_passenger(self, passenger_id: int) -> Passenger:
        """Raw record, for internal callers only"""
        with self._lock:
            return self.passengers.get(passenger_id)

    # tickets

    def book_ticket(self, train_name: str, passenger_id: int, departure_station: str,
                    arrival_station: str, departure: TimeValue, arrival: Optional[TimeValue] = None,
                    *, coach: str, seat: int, fare: Union[Decimal, float, str]) -> int:
        with self._mutation("book ticket") as now:
            request = TicketRequest(
                train_name=train_name,
                passenger_id=passenger_id,
                departure_station=departure_station,
                arrival_station=arrival_station,
                departure=self._local(departure),
                arrival=self._local(arrival),
                coach=coach,
                seat=seat,
                fare=fare,
            )
            return self.tickets.book(request, now).id

    def reschedule_ticket(self, ticket_id: int, new_seat: Optional[int] = None,
                          new_interval: Optional[Tuple[TimeValue, Optional[TimeValue]]] = None) -> Reservation:
        with self._mutation("reschedule ticket") as now:
            interval = None
            if new_interval is not None:
                departure, arrival = new_interval
                interval = (self._local(departure), self._local(arrival))
            return self.tickets.reschedule(ticket_id, now, new_seat=new_seat, new_interval=interval)

    def cancel_ticket(self, ticket_id: int) -> None:
        with self._mutation("cancel ticket"):
            self.tickets.cancel(ticket_id)

    def get_ticket(self, ticket_id: int) -> Reservation:
        """Raw record, for internal callers only"""
        with self._lock:
            return self.reservations.get(ticket_id)

    def sweep_expired(self) -> int:
        with self._lock:
            return self.tickets.sweeper.sweep_expired(self.clock.local_now())

    async def load_bookings(self, path: str) -> Tuple[int, int]:
        """Load passengers and tickets from a JSON file; returns (passengers, tickets) created"""
        async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
            data = json.loads(await f.read())
        passengers = [self.create_passenger(p) for p in data.get("passengers", [])]
        tickets = [self.book_ticket(**t) for t in data.get("tickets", [])]
        logger.info(f"Loaded {len(passengers)} passengers and {len(tickets)} tickets from {path}")
        return len(passengers), len(tickets)

    # catalog changes that touch reservations

    def rename_train(self, old_name: str, new_name: str) -> int:
        """Rename a train; route stops and tickets follow. Returns tickets updated."""
        with self._mutation("rename train"):
            self.catalog.rename_train(old_name, new_name)
            count = self.reservations.rename_train(old_name, new_name)
            logger.info(f"Train {old_name} renamed to {new_name}, {count} tickets updated")
            return count

    def remove_route_stop(self, train_name: str, station: str) -> None:
        with self._mutation("remove route stop"):
            self.catalog.get_train(train_name)
            if self.reservations.references_stop(train_name, station):
                raise ReferentialError(f"Tickets still reference {station} on {train_name}")
            self.catalog.remove_route_stop(train_name, station)

    # views

    def list_active_passengers(self) -> List[PassengerView]:
        with self._lock:
            return self.projector.active_passengers(self.clock.local_now())

    def list_active_tickets(self, train_name: Optional[str] = None,
                            passenger_id: Optional[int] = None) -> List[TicketView]:
        with self._lock:
            return self.projector.active_tickets(self.clock.local_now(), train_name, passenger_id)

    def list_train_stops(self, train_name: str) -> List[TrainStop]:
        with self._lock:
            return self.projector.train_stops(train_name, self.clock.local_now())
