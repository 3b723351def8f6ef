"""Passenger models"""

from datetime import date
from typing import Annotated, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from ..utils.date_utils import validate_date


def _iso_date(value):
    if isinstance(value, str) and not validate_date(value):
        raise ValueError(f"date_of_birth must be YYYY-MM-DD, got {value!r}")
    return value


IsoDate = Annotated[date, BeforeValidator(_iso_date)]


class PassengerFields(BaseModel):
    """Passenger details supplied by the caller"""
    model_config = ConfigDict(extra="forbid")

    id: Optional[int] = Field(None, ge=1, description="Passenger id (assigned when omitted)")
    first_name: str = Field(..., min_length=1, description="First name")
    last_name: Optional[str] = Field(None, description="Last name")
    date_of_birth: IsoDate = Field(..., description="Date of birth")
    email: Optional[str] = Field(None, description="Email address")
    phone_number: str = Field(..., description="10-digit phone number")


class PassengerUpdate(BaseModel):
    """Partial passenger update; unset fields keep their stored value"""
    model_config = ConfigDict(extra="forbid")

    first_name: Optional[str] = Field(None, min_length=1, description="First name")
    last_name: Optional[str] = Field(None, description="Last name")
    date_of_birth: Optional[IsoDate] = Field(None, description="Date of birth")
    email: Optional[str] = Field(None, description="Email address")
    phone_number: Optional[str] = Field(None, description="10-digit phone number")


class Passenger(BaseModel):
    """Stored passenger record"""
    id: int = Field(..., description="Passenger id")
    first_name: str = Field(..., description="First name")
    last_name: Optional[str] = Field(None, description="Last name")
    date_of_birth: date = Field(..., description="Date of birth")
    email: Optional[str] = Field(None, description="Email address")
    phone_number: str = Field(..., description="10-digit phone number")

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)


class PassengerView(BaseModel):
    """Passenger as exposed to callers, phone masked"""
    id: int = Field(..., description="Passenger id")
    first_name: str = Field(..., description="First name")
    last_name: Optional[str] = Field(None, description="Last name")
    date_of_birth: date = Field(..., description="Date of birth")
    email: Optional[str] = Field(None, description="Email address")
    phone_number: str = Field(..., description="Masked phone number")
