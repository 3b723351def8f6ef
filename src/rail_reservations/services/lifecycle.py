"""Expired ticket sweeping"""

import logging
from datetime import datetime

from ..models.ticket import Reservation

logger = logging.getLogger(__name__)


def is_expired(reservation: Reservation, now: datetime) -> bool:
    """Arrival known and both departure and arrival already passed"""
    return (reservation.arrival is not None
            and now > reservation.departure
            and now > reservation.arrival)


def is_active(reservation: Reservation, now: datetime) -> bool:
    return now < reservation.departure or reservation.arrival is None or now < reservation.arrival


class LifecycleSweeper:
    """Removes tickets whose journey is over"""

    def __init__(self, store):
        self.store = store

    def sweep_expired(self, now: datetime) -> int:
        expired = [r.id for r in self.store.all() if is_expired(r, now)]
        for ticket_id in expired:
            self.store.remove(ticket_id)
        if expired:
            logger.info(f"Purged {len(expired)} expired tickets: {expired}")
        return len(expired)
