"""Data models"""

from .catalog import Station, Coach, Train, RouteStop, CatalogData
from .passenger import Passenger, PassengerFields, PassengerUpdate, PassengerView
from .ticket import Reservation, TicketRequest, TicketView, TrainStop

__all__ = [
    "Station",
    "Coach",
    "Train",
    "RouteStop",
    "CatalogData",
    "Passenger",
    "PassengerFields",
    "PassengerUpdate",
    "PassengerView",
    "Reservation",
    "TicketRequest",
    "TicketView",
    "TrainStop",
]
