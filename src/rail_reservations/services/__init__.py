"""Service layer"""

from .catalog_service import CatalogService
from .passenger_service import PassengerStore
from .ticket_service import ReservationStore, TicketService
from .validation import ValidationGate
from .conflict_detector import ConflictDetector
from .lifecycle import LifecycleSweeper
from .privacy import PrivacyProjector

__all__ = [
    "CatalogService",
    "PassengerStore",
    "ReservationStore",
    "TicketService",
    "ValidationGate",
    "ConflictDetector",
    "LifecycleSweeper",
    "PrivacyProjector",
]
