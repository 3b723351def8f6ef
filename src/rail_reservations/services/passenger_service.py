"""Passenger store"""

import logging
from datetime import date
from typing import Callable, Dict, List, Optional

from ..errors import DuplicateRecord, ReferentialError
from ..models.passenger import Passenger, PassengerFields, PassengerUpdate
from .validation import ValidationGate

logger = logging.getLogger(__name__)


class PassengerStore:
    """Holds passenger records; a record becomes visible only after it passes the gate"""

    def __init__(self, gate: ValidationGate, on_delete: Optional[Callable[[int], int]] = None):
        self.gate = gate
        # referential action run before a passenger row is removed
        self.on_delete = on_delete
        self._rows: Dict[int, Passenger] = {}
        self._next_id = 1

    def all(self) -> List[Passenger]:
        return list(self._rows.values())

    def get(self, passenger_id: int) -> Passenger:
        passenger = self._rows.get(passenger_id)
        if passenger is None:
            raise ReferentialError(f"Unknown passenger: {passenger_id}")
        return passenger

    def exists(self, passenger_id: int) -> bool:
        return passenger_id in self._rows

    def create(self, fields: PassengerFields, today: date) -> Passenger:
        passenger_id = fields.id if fields.id is not None else self._next_id
        if passenger_id in self._rows:
            raise DuplicateRecord(f"Passenger already exists: {passenger_id}")
        passenger = Passenger(**fields.model_dump(exclude={"id"}), id=passenger_id)
        self.gate.validate_passenger(passenger, today)

        self._rows[passenger_id] = passenger
        self._next_id = max(self._next_id, passenger_id + 1)
        self._rows[passenger_id] = self.gate.normalize_contact(passenger)
        logger.info(f"Passenger {passenger_id} created")
        return self._rows[passenger_id]

    def update(self, passenger_id: int, fields: PassengerUpdate, today: date) -> Passenger:
        current = self.get(passenger_id)
        changed = Passenger.model_validate({**current.model_dump(), **fields.model_dump(exclude_unset=True)})
        self.gate.validate_passenger(changed, today)

        self._rows[passenger_id] = changed
        self._rows[passenger_id] = self.gate.normalize_contact(changed)
        logger.info(f"Passenger {passenger_id} updated")
        return self._rows[passenger_id]

    def delete(self, passenger_id: int) -> int:
        """Remove a passenger; returns how many dependent tickets were removed with it"""
        self.get(passenger_id)
        removed = self.on_delete(passenger_id) if self.on_delete else 0
        del self._rows[passenger_id]
        logger.info(f"Passenger {passenger_id} deleted with {removed} tickets")
        return removed
