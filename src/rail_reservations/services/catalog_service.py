import os
import json
import logging
from typing import Dict, List

import aiofiles

from ..errors import DuplicateRecord, ReferentialError
from ..models.catalog import CatalogData, Coach, Station, Train

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Static reference data: stations, coaches, trains and their route stops.

    The reservation engine only reads from it, apart from the two
    route-changing operations the engine coordinates (rename_train,
    remove_route_stop).
    """

    def __init__(self):
        self.stations: Dict[str, Station] = {}
        self.coaches: Dict[str, Coach] = {}
        self.trains: Dict[str, Train] = {}

    async def load_catalog(self, path: str) -> bool:
        """Load stations, coaches and trains from a JSON file"""
        if not os.path.exists(path):
            logger.error(f"Catalog file not found: {path}")
            return False
        async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
            content = await f.read()
        self.load_data(CatalogData.model_validate(json.loads(content)))
        logger.info(f"Loaded {len(self.stations)} stations, {len(self.coaches)} coaches, "
                    f"{len(self.trains)} trains from {path}")
        return True

    def load_data(self, data: CatalogData) -> None:
        for station in data.stations:
            self.add_station(station.name)
        for coach in data.coaches:
            self.add_coach(coach.code)
        for train in data.trains:
            self.add_train(train)

    def add_station(self, name: str) -> Station:
        if name in self.stations:
            raise DuplicateRecord(f"Station already exists: {name}")
        station = Station(name=name)
        self.stations[name] = station
        return station

    def add_coach(self, code: str) -> Coach:
        if code in self.coaches:
            raise DuplicateRecord(f"Coach already exists: {code}")
        coach = Coach(code=code)
        self.coaches[code] = coach
        return coach

    def add_train(self, train: Train) -> Train:
        if train.name in self.trains:
            raise DuplicateRecord(f"Train already exists: {train.name}")
        for name in (train.station1, train.station2, *train.stops):
            if name not in self.stations:
                raise ReferentialError(f"Train {train.name} references unknown station: {name}")
        self.trains[train.name] = train
        return train

    def remove_route_stop(self, train_name: str, station: str) -> Train:
        train = self.get_train(train_name)
        if station not in train.stops:
            raise ReferentialError(f"{train_name} does not stop at {station}")
        updated = train.model_copy(update={"stops": [s for s in train.stops if s != station]})
        self.trains[train_name] = updated
        return updated

    def rename_train(self, old_name: str, new_name: str) -> Train:
        train = self.get_train(old_name)
        if new_name in self.trains:
            raise DuplicateRecord(f"Train already exists: {new_name}")
        renamed = train.model_copy(update={"name": new_name})
        del self.trains[old_name]
        self.trains[new_name] = renamed
        return renamed

    def get_train(self, name: str) -> Train:
        train = self.trains.get(name)
        if train is None:
            raise ReferentialError(f"Unknown train: {name}")
        return train

    def has_coach(self, code: str) -> bool:
        return code in self.coaches

    def is_route_stop(self, train_name: str, station: str) -> bool:
        train = self.trains.get(train_name)
        return train is not None and station in train.stops

    def route(self, train_name: str) -> List[str]:
        """Stations of a train in travel order"""
        return list(self.get_train(train_name).stops)
