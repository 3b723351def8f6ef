"""Ticket models"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from ..utils.date_utils import parse_datetime


def _to_datetime(value):
    if isinstance(value, str):
        return parse_datetime(value)
    return value


Timestamp = Annotated[datetime, BeforeValidator(_to_datetime)]


class TicketRequest(BaseModel):
    """Booking request"""
    model_config = ConfigDict(extra="forbid")

    train_name: str = Field(..., description="Train name")
    passenger_id: int = Field(..., description="Passenger id")
    departure_station: str = Field(..., description="Station of departure")
    arrival_station: str = Field(..., description="Station of arrival")
    departure: Timestamp = Field(..., description="Expected departure time")
    arrival: Optional[Timestamp] = Field(None, description="Expected arrival time")
    coach: str = Field(..., description="Coach code")
    seat: int = Field(..., ge=1, description="Seat number")
    fare: Decimal = Field(..., max_digits=10, decimal_places=2, description="Ticket fare")


class Reservation(BaseModel):
    """Stored ticket"""
    id: int = Field(..., description="Ticket id")
    train_name: str = Field(..., description="Train name")
    passenger_id: int = Field(..., description="Passenger id")
    departure_station: str = Field(..., description="Station of departure")
    arrival_station: str = Field(..., description="Station of arrival")
    departure: datetime = Field(..., description="Expected departure time")
    arrival: Optional[datetime] = Field(None, description="Expected arrival time")
    coach: str = Field(..., description="Coach code")
    seat: int = Field(..., ge=1, description="Seat number")
    fare: Decimal = Field(..., description="Ticket fare")

    @property
    def seat_key(self):
        return (self.train_name, self.coach, self.seat)


class TicketView(BaseModel):
    """Active ticket joined with its passenger, phone masked"""
    id: int = Field(..., description="Ticket id")
    passenger_id: int = Field(..., description="Passenger id")
    name: str = Field(..., description="Passenger name")
    phone_number: str = Field(..., description="Masked phone number")
    train_name: str = Field(..., description="Train name")
    departure_station: str = Field(..., description="Station of departure")
    arrival_station: str = Field(..., description="Station of arrival")
    departure: datetime = Field(..., description="Expected departure time")
    arrival: Optional[datetime] = Field(None, description="Expected arrival time")
    coach: str = Field(..., description="Coach code")
    seat: int = Field(..., description="Seat number")
    fare: Decimal = Field(..., description="Ticket fare")


class TrainStop(BaseModel):
    """Station with a scheduled departure of an active ticket"""
    station: str = Field(..., description="Station name")
    departure: datetime = Field(..., description="Expected departure time")
