"""Catalog models"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field, model_validator


class Station(BaseModel):
    """Station"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Station name")


class Coach(BaseModel):
    """Coach class"""
    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=1, max_length=2, description="Coach code")


class RouteStop(BaseModel):
    """A station a train stops at"""
    model_config = ConfigDict(frozen=True)

    train_name: str = Field(..., description="Train name")
    station: str = Field(..., description="Station name")


class Train(BaseModel):
    """Train with its terminals and ordered stops"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Train name")
    station1: str = Field(..., description="Starting station")
    station2: str = Field(..., description="Ending station")
    stops: List[str] = Field(default_factory=list, description="Stations served, in travel order")

    @model_validator(mode="after")
    def check_route(self) -> "Train":
        if self.station1 == self.station2:
            raise ValueError(f"Train {self.name} starts and ends at {self.station1}")
        if len(set(self.stops)) != len(self.stops):
            raise ValueError(f"Train {self.name} passes a station more than once")
        return self

    def route_stops(self) -> List[RouteStop]:
        return [RouteStop(train_name=self.name, station=s) for s in self.stops]


class CatalogData(BaseModel):
    """Catalog file contents"""
    stations: List[Station] = Field(default_factory=list, description="Stations")
    coaches: List[Coach] = Field(default_factory=list, description="Coaches")
    trains: List[Train] = Field(default_factory=list, description="Trains")
